"""Availability service - decides whether a technician can take a slot on a date"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import Technician, TimeSlot
from ...shared.time_window import format_minutes, local_now
from .errors import ErrorKind, Result, SchedulingError
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Availability:
    technician: Technician
    time_slot: TimeSlot


@dataclass(frozen=True)
class SlotAvailability:
    time_slot: TimeSlot
    available: bool
    reason: Optional[str] = None


def working_hours_error(technician: Technician, time_slot: TimeSlot) -> Optional[SchedulingError]:
    """OUTSIDE_WORKING_HOURS when the slot does not fit the technician's day"""
    working = technician.working_window
    if working is None:
        return None

    slot_window = time_slot.window
    if working.contains(slot_window):
        return None

    return SchedulingError(
        ErrorKind.OUTSIDE_WORKING_HOURS,
        f"Time slot {slot_window} is outside technician {technician.name}'s "
        f"working hours {working}",
        {
            "technicianId": technician.id,
            "workingHours": {
                "startTime": format_minutes(working.start),
                "endTime": format_minutes(working.end),
            },
            "timeSlot": {"startTime": time_slot.start_time, "endTime": time_slot.end_time},
        },
    )


class AvailabilityChecker:
    """
    Runs the availability test in a fixed order:
    technician, time slot, working hours, then existing bookings.
    The first failing step decides the outcome.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = local_now):
        self.db = db
        self.repo = SchedulingRepository()
        self.clock = clock

    def check_availability(
        self,
        technician_id: str,
        scheduled_date: date,
        time_slot_id: str,
        exclude_job_id: Optional[str] = None,
        lock: bool = False,
    ) -> Result[Availability]:
        """
        Check whether the technician is free for the slot on the date.

        ``lock`` takes a row lock on the technician for the rest of the
        transaction, serialising concurrent bookings for the same person.
        ``exclude_job_id`` ignores a job's own booking when it is rescheduled.
        """
        technician = self.repo.find_technician(self.db, technician_id, for_update=lock)
        if not technician:
            return Result.failure(SchedulingError.not_found("Technician", technician_id))
        if not technician.is_active:
            return Result.failure(SchedulingError.inactive("Technician", technician_id))

        time_slot = self.repo.find_time_slot(self.db, time_slot_id)
        if not time_slot:
            return Result.failure(SchedulingError.not_found("Time slot", time_slot_id))
        if not time_slot.is_active:
            return Result.failure(SchedulingError.inactive("Time slot", time_slot_id))

        hours_error = working_hours_error(technician, time_slot)
        if hours_error:
            return Result.failure(hours_error)

        conflict = self.repo.find_conflicting_job(
            self.db,
            technician_id,
            scheduled_date,
            time_slot_id,
            exclude_job_id=exclude_job_id,
        )
        if conflict:
            logger.info(
                f"⚠️ Technician {technician_id} already booked on {scheduled_date} "
                f"in slot {time_slot_id} (job {conflict.id})"
            )
            return Result.failure(
                SchedulingError(
                    ErrorKind.DOUBLE_BOOKED,
                    f"Technician {technician.name} is already assigned to another job "
                    f"on {scheduled_date.isoformat()} during {time_slot.label}",
                    {
                        "technicianId": technician_id,
                        "scheduledDate": scheduled_date.isoformat(),
                        "timeSlotId": time_slot_id,
                        "conflictingJobId": conflict.id,
                    },
                )
            )

        return Result.success(Availability(technician=technician, time_slot=time_slot))

    def list_available_technicians(
        self,
        scheduled_date: date,
        time_slot_id: str,
        apply_working_hours: bool = False,
    ) -> Result[list[Technician]]:
        """
        Active technicians with no ASSIGNED job in the slot on the date.

        Working hours are ignored unless ``apply_working_hours`` is set.
        """
        if scheduled_date < self.clock().date():
            return Result.failure(SchedulingError.past_date(scheduled_date))

        time_slot = self.repo.find_time_slot(self.db, time_slot_id)
        if not time_slot:
            return Result.failure(SchedulingError.not_found("Time slot", time_slot_id))
        if not time_slot.is_active:
            return Result.failure(SchedulingError.inactive("Time slot", time_slot_id))

        busy = self.repo.booked_technician_ids(self.db, scheduled_date, time_slot_id)
        available = []
        for technician in self.repo.list_active_technicians(self.db):
            if technician.id in busy:
                continue
            if apply_working_hours and working_hours_error(technician, time_slot):
                continue
            available.append(technician)

        return Result.success(available)

    def list_available_slots(
        self, technician_id: str, scheduled_date: date
    ) -> Result[list[SlotAvailability]]:
        """Every active slot with whether this technician could take it on the date"""
        if scheduled_date < self.clock().date():
            return Result.failure(SchedulingError.past_date(scheduled_date))

        technician = self.repo.find_technician(self.db, technician_id)
        if not technician:
            return Result.failure(SchedulingError.not_found("Technician", technician_id))
        if not technician.is_active:
            return Result.failure(SchedulingError.inactive("Technician", technician_id))

        booked = self.repo.booked_time_slot_ids(self.db, technician_id, scheduled_date)
        slots = []
        for time_slot in self.repo.list_active_time_slots(self.db):
            if time_slot.id in booked:
                slots.append(SlotAvailability(time_slot, False, "Already booked"))
                continue
            hours_error = working_hours_error(technician, time_slot)
            if hours_error:
                slots.append(SlotAvailability(time_slot, False, "Outside working hours"))
                continue
            slots.append(SlotAvailability(time_slot, True))

        return Result.success(slots)
