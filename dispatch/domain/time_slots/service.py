"""Time slot service - Business logic for configuring the bookable windows of the day"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import TimeSlot
from ...shared.time_window import InvalidTimeFormat, generate_time_label, to_minutes
from ..scheduling.errors import ErrorKind, Result, SchedulingError
from .repository import TimeSlotRepository
from .schemas import TimeSlotCreate, TimeSlotUpdate

logger = logging.getLogger(__name__)

DEFAULT_TIME_SLOTS = [
    ("08:00", "10:00"),
    ("10:00", "12:00"),
    ("11:00", "13:00"),
    ("13:00", "15:00"),
    ("14:00", "16:00"),
    ("16:00", "18:00"),
]


def _invalid_time(error: InvalidTimeFormat) -> SchedulingError:
    return SchedulingError(ErrorKind.INVALID_TIME_FORMAT, str(error), {"value": str(error.value)})


def _end_before_start() -> SchedulingError:
    return SchedulingError(ErrorKind.VALIDATION_ERROR, "End time must be after start time")


class TimeSlotService:
    """Service layer for time slot business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeSlotRepository()

    def list_time_slots(self, active_only: bool = False) -> list[TimeSlot]:
        return self.repo.list_time_slots(self.db, active_only)

    def get_time_slot(self, time_slot_id: str) -> Result[TimeSlot]:
        time_slot = self.repo.get_time_slot(self.db, time_slot_id)
        if not time_slot:
            return Result.failure(SchedulingError.not_found("Time slot", time_slot_id))
        return Result.success(time_slot)

    def create_time_slot(self, data: TimeSlotCreate) -> Result[TimeSlot]:
        """Create a slot; the label is derived from the times, order defaults to last"""
        try:
            start, end = to_minutes(data.startTime), to_minutes(data.endTime)
        except InvalidTimeFormat as e:
            return Result.failure(_invalid_time(e))

        if start >= end:
            return Result.failure(_end_before_start())

        duplicate = self._duplicate_window_error(start, end)
        if duplicate:
            return Result.failure(duplicate)

        order = data.order if data.order is not None else self.repo.max_order(self.db) + 1
        time_slot = self.repo.create_time_slot(
            self.db,
            label=generate_time_label(start, end),
            start_minute=start,
            end_minute=end,
            order=order,
            is_active=data.isActive,
        )
        logger.info(f"📅 Time slot created: {time_slot.label} (order {time_slot.order})")
        return Result.success(time_slot)

    def update_time_slot(self, time_slot_id: str, data: TimeSlotUpdate) -> Result[TimeSlot]:
        """Slots referenced by any job are frozen"""
        found = self.get_time_slot(time_slot_id)
        if not found.ok:
            return found
        time_slot = found.value

        in_use = self._in_use_error(time_slot, "update")
        if in_use:
            return Result.failure(in_use)

        updates = {"order": data.order, "is_active": data.isActive}

        if data.startTime is not None or data.endTime is not None:
            try:
                start = to_minutes(data.startTime) if data.startTime is not None else time_slot.start_minute
                end = to_minutes(data.endTime) if data.endTime is not None else time_slot.end_minute
            except InvalidTimeFormat as e:
                return Result.failure(_invalid_time(e))

            if start >= end:
                return Result.failure(_end_before_start())

            duplicate = self._duplicate_window_error(start, end, exclude_id=time_slot.id)
            if duplicate:
                return Result.failure(duplicate)

            updates.update(
                start_minute=start,
                end_minute=end,
                label=generate_time_label(start, end),
            )

        time_slot = self.repo.update_time_slot(self.db, time_slot, **updates)
        logger.info(f"📅 Time slot {time_slot.id} updated")
        return Result.success(time_slot)

    def delete_time_slot(self, time_slot_id: str) -> Result[dict]:
        found = self.get_time_slot(time_slot_id)
        if not found.ok:
            return Result.failure(found.error)
        time_slot = found.value

        in_use = self._in_use_error(time_slot, "delete")
        if in_use:
            return Result.failure(in_use)

        self.repo.delete_time_slot(self.db, time_slot)
        logger.info(f"🗑️ Time slot {time_slot_id} deleted")
        return Result.success({"message": "Time slot deleted successfully"})

    def seed_default_time_slots(self) -> int:
        """Create the six default slots when no slot exists yet; returns how many were created"""
        if self.repo.count_time_slots(self.db) > 0:
            logger.info("ℹ️ Default time slots already exist")
            return 0

        logger.info("📅 Creating default time slots...")
        slots = []
        for order, (start_time, end_time) in enumerate(DEFAULT_TIME_SLOTS, start=1):
            start, end = to_minutes(start_time), to_minutes(end_time)
            slots.append(
                {
                    "label": generate_time_label(start, end),
                    "start_minute": start,
                    "end_minute": end,
                    "order": order,
                    "is_active": True,
                }
            )
        created = self.repo.bulk_create(self.db, slots)
        logger.info("✅ Default time slots created successfully!")
        return created

    def _duplicate_window_error(
        self, start: int, end: int, exclude_id: Optional[str] = None
    ) -> Optional[SchedulingError]:
        existing = self.repo.find_by_window(self.db, start, end, exclude_id)
        if not existing:
            return None
        return SchedulingError(
            ErrorKind.CONFLICT,
            f"Time slot overlaps with existing slot: {existing.label}",
            {"existingTimeSlotId": existing.id},
        )

    def _in_use_error(self, time_slot: TimeSlot, action: str) -> Optional[SchedulingError]:
        job_count = self.repo.count_jobs_for_slot(self.db, time_slot.id)
        if job_count == 0:
            return None
        return SchedulingError(
            ErrorKind.SLOT_IN_USE,
            f"Cannot {action} time slot. It is referenced by {job_count} job(s). "
            f"Please reassign or delete the related jobs first.",
            {"timeSlotId": time_slot.id, "jobCount": job_count},
        )
