"""
Job scheduler service - books, edits, completes and deletes jobs.

Booking runs in three phases:
1. availability check and address resolution, outside any write
2. one transaction that locks the technician, re-checks for a conflict and
   inserts the job; the partial unique index on active bookings backs it up
3. notifications, only after the commit, reported but never able to undo it
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import GEOCODING_TIMEOUT_SECONDS
from ...models import Job, JobStatus, Technician
from ...services.address_resolver import AddressResolver, GeoPoint, ParsedAddress
from ...services.notification_service import NotificationReport, Notifier, notify_job_scheduled
from ...shared.time_window import local_now
from ..preferences.schemas import NotificationSettings
from .availability_service import AvailabilityChecker
from .completion import CompletionCutoff, complete_if_due
from .errors import ErrorKind, Result, SchedulingError
from .repository import SchedulingRepository
from .schemas import JobCreate, JobUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledJob:
    job: Job
    notifications: NotificationReport


@dataclass(frozen=True)
class ResolvedLocation:
    parsed: Optional[ParsedAddress]
    point: Optional[GeoPoint]


def _double_booked(technician_id: str, scheduled_date, time_slot_id: str) -> SchedulingError:
    return SchedulingError(
        ErrorKind.DOUBLE_BOOKED,
        "Technician is already assigned to another job in this time slot",
        {
            "technicianId": technician_id,
            "scheduledDate": scheduled_date.isoformat(),
            "timeSlotId": time_slot_id,
        },
    )


def _persistence_failure(action: str, error: Exception) -> SchedulingError:
    logger.error(f"❌ Database error while trying to {action}: {error}")
    return SchedulingError(ErrorKind.PERSISTENCE_FAILURE, f"Failed to {action}")


class JobScheduler:
    """Service layer for job booking and lifecycle changes"""

    def __init__(
        self,
        db: Session,
        resolver: AddressResolver,
        notifier: Notifier,
        clock: Callable[[], datetime] = local_now,
        geocode_timeout: float = GEOCODING_TIMEOUT_SECONDS,
    ):
        self.db = db
        self.repo = SchedulingRepository()
        self.resolver = resolver
        self.notifier = notifier
        self.clock = clock
        self.geocode_timeout = geocode_timeout
        self.availability = AvailabilityChecker(db, clock=clock)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_job(
        self, data: JobCreate, settings: NotificationSettings
    ) -> Result[ScheduledJob]:
        """
        Book a job for a technician in a slot on a date.

        ``settings`` is the notification preference snapshot for this request.
        """
        missing = [
            name for name in ("technicianId", "timeSlotId") if not getattr(data, name)
        ]
        if missing:
            return Result.failure(SchedulingError.missing_fields(missing))

        checked = self.availability.check_availability(
            data.technicianId, data.scheduledDate, data.timeSlotId
        )
        if not checked.ok:
            logger.info(f"⚠️ Booking rejected: {checked.error.kind.value} - {checked.error.message}")
            return Result.failure(checked.error)

        location = await self._resolve_location(
            data.serviceAddress, data.latitude, data.longitude
        )

        booked = self._commit_booking(data, location)
        if not booked.ok:
            return Result.failure(booked.error)
        job, technician = booked.value

        logger.info(
            f"✅ Job {job.id} booked for technician {technician.id} on "
            f"{job.scheduled_date} in slot {job.time_slot_id}"
        )

        report = await notify_job_scheduled(self.notifier, job, technician, settings)
        return Result.success(ScheduledJob(job=job, notifications=report))

    def _commit_booking(
        self, data: JobCreate, location: ResolvedLocation
    ) -> Result[tuple[Job, Technician]]:
        parsed = location.parsed
        point = location.point

        try:
            # Re-check under the technician row lock; a concurrent booking
            # either waits here or trips the unique index on insert.
            rechecked = self.availability.check_availability(
                data.technicianId, data.scheduledDate, data.timeSlotId, lock=True
            )
            if not rechecked.ok:
                self.db.rollback()
                return Result.failure(rechecked.error)

            job = self.repo.create_job(
                self.db,
                customer_name=data.customerName,
                customer_phone=data.customerPhone,
                customer_email=data.customerEmail,
                service_address=data.serviceAddress,
                street=parsed.street if parsed else None,
                city=parsed.city if parsed else None,
                state=parsed.state if parsed else None,
                state_code=parsed.state_code if parsed else None,
                zip_code=data.zipCode or (parsed.zip_code if parsed else None),
                latitude=point.latitude if point else None,
                longitude=point.longitude if point else None,
                job_description=data.jobDescription,
                scheduled_date=data.scheduledDate,
                time_slot_id=data.timeSlotId,
                technician_id=data.technicianId,
                status=JobStatus.ASSIGNED.value,
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(
                f"⚠️ Concurrent booking lost for technician {data.technicianId} on "
                f"{data.scheduledDate} in slot {data.timeSlotId}"
            )
            return Result.failure(
                _double_booked(data.technicianId, data.scheduledDate, data.timeSlotId)
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            return Result.failure(_persistence_failure("create job", e))

        self.db.refresh(job)
        return Result.success((job, job.technician))

    async def _resolve_location(
        self,
        address: str,
        latitude: Optional[float],
        longitude: Optional[float],
    ) -> ResolvedLocation:
        """Parse and geocode the address; any failure leaves the fields empty"""
        parsed = None
        try:
            parsed = self.resolver.parse_address(address)
        except Exception as e:
            logger.warning(f"⚠️ Address parsing failed for {address!r}: {e}")

        if latitude is not None and longitude is not None:
            return ResolvedLocation(parsed, GeoPoint(latitude=latitude, longitude=longitude))

        point = None
        try:
            point = await asyncio.wait_for(
                self.resolver.geocode(address), timeout=self.geocode_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"⏱️ Geocoding timed out after {self.geocode_timeout}s, saving job without coordinates"
            )
        except Exception as e:
            logger.warning(f"⚠️ Geocoding failed, saving job without coordinates: {e}")

        if point is None:
            logger.warning(f"⚠️ No coordinates resolved for address: {address}")
        return ResolvedLocation(parsed, point)

    # ------------------------------------------------------------------
    # Update / complete / delete
    # ------------------------------------------------------------------

    def _load_job(self, job_id: str) -> Result[Job]:
        job = self.repo.find_job(self.db, job_id)
        if not job:
            return Result.failure(SchedulingError.not_found("Job", job_id))
        complete_if_due(self.db, [job], self.clock())
        return Result.success(job)

    async def update_job(self, job_id: str, data: JobUpdate) -> Result[Job]:
        """
        Edit a job.

        Status only moves forward (PENDING, ASSIGNED, COMPLETED); asking for the
        current status is a no-op. Moving a job to another technician, date or
        slot re-runs the availability test with the job's own booking ignored.
        """
        loaded = self._load_job(job_id)
        if not loaded.ok:
            return loaded
        job = loaded.value

        current = JobStatus(job.status)
        target = data.status or current
        if target.rank < current.rank:
            return Result.failure(
                SchedulingError(
                    ErrorKind.INVALID_STATUS_TRANSITION,
                    f"Cannot change job status from {current.value} to {target.value}",
                    {"from": current.value, "to": target.value},
                )
            )

        technician_id = data.technicianId or job.technician_id
        scheduled_date = data.scheduledDate or job.scheduled_date
        time_slot_id = data.timeSlotId or job.time_slot_id
        rescheduled = (
            technician_id != job.technician_id
            or scheduled_date != job.scheduled_date
            or time_slot_id != job.time_slot_id
        )

        if rescheduled and current == JobStatus.COMPLETED:
            return Result.failure(
                SchedulingError(
                    ErrorKind.INVALID_STATUS_TRANSITION,
                    "Completed jobs cannot be rescheduled",
                    {"jobId": job.id},
                )
            )

        updates = {
            "customer_name": data.customerName,
            "customer_phone": data.customerPhone,
            "customer_email": data.customerEmail,
            "job_description": data.jobDescription,
            "zip_code": data.zipCode,
        }
        updates = {key: value for key, value in updates.items() if value is not None}

        if data.serviceAddress and data.serviceAddress != job.service_address:
            location = await self._resolve_location(
                data.serviceAddress, data.latitude, data.longitude
            )
            updates["service_address"] = data.serviceAddress
            if location.parsed:
                updates.update(
                    street=location.parsed.street,
                    city=location.parsed.city,
                    state=location.parsed.state,
                    state_code=location.parsed.state_code,
                )
                if not data.zipCode:
                    updates["zip_code"] = location.parsed.zip_code
            updates["latitude"] = location.point.latitude if location.point else None
            updates["longitude"] = location.point.longitude if location.point else None
        elif data.latitude is not None and data.longitude is not None:
            updates["latitude"] = data.latitude
            updates["longitude"] = data.longitude

        if target != current:
            updates["status"] = target.value

        try:
            if rescheduled and target != JobStatus.COMPLETED:
                rechecked = self.availability.check_availability(
                    technician_id,
                    scheduled_date,
                    time_slot_id,
                    exclude_job_id=job.id,
                    lock=True,
                )
                if not rechecked.ok:
                    self.db.rollback()
                    return Result.failure(rechecked.error)

            if rescheduled:
                updates.update(
                    technician_id=technician_id,
                    scheduled_date=scheduled_date,
                    time_slot_id=time_slot_id,
                )

            self.repo.update_job(self.db, job, **updates)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return Result.failure(_double_booked(technician_id, scheduled_date, time_slot_id))
        except SQLAlchemyError as e:
            self.db.rollback()
            return Result.failure(_persistence_failure("update job", e))

        self.db.refresh(job)
        logger.info(f"✏️ Job {job.id} updated ({', '.join(sorted(updates)) or 'no changes'})")
        return Result.success(job)

    def complete_job(self, job_id: str) -> Result[Job]:
        """Mark a job COMPLETED now; completing a completed job changes nothing"""
        loaded = self._load_job(job_id)
        if not loaded.ok:
            return loaded
        job = loaded.value

        if job.status == JobStatus.COMPLETED.value:
            return Result.success(job)

        try:
            self.repo.update_job_status(
                self.db,
                [job.id],
                JobStatus.COMPLETED,
                from_status=JobStatus(job.status),
                stamp=self.clock(),
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            return Result.failure(_persistence_failure("complete job", e))

        self.db.refresh(job)
        logger.info(f"🏁 Job {job.id} marked as completed")
        return Result.success(job)

    def delete_job(self, job_id: str) -> Result[dict]:
        """Delete a job once its slot has fully elapsed, whatever its status"""
        loaded = self._load_job(job_id)
        if not loaded.ok:
            return Result.failure(loaded.error)
        job = loaded.value

        cutoff = CompletionCutoff.at(self.clock())
        if not cutoff.has_elapsed(job.scheduled_date, job.time_slot.window):
            return Result.failure(
                SchedulingError(
                    ErrorKind.SLOT_STILL_ACTIVE,
                    f"Cannot delete job until its time slot ({job.time_slot.label} on "
                    f"{job.scheduled_date.isoformat()}) has ended",
                    {"jobId": job.id},
                )
            )

        try:
            self.repo.delete_job(self.db, job)
        except SQLAlchemyError as e:
            self.db.rollback()
            return Result.failure(_persistence_failure("delete job", e))

        logger.info(f"🗑️ Job {job_id} deleted")
        return Result.success({"message": "Job deleted successfully"})
