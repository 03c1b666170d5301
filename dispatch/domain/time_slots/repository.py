"""Time slot repository - Database operations for time slots"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Job, TimeSlot


class TimeSlotRepository:
    """Repository for time slot database operations"""

    @staticmethod
    def list_time_slots(db: Session, active_only: bool = False) -> list[TimeSlot]:
        query = db.query(TimeSlot)
        if active_only:
            query = query.filter(TimeSlot.is_active.is_(True))
        return query.order_by(TimeSlot.order.asc(), TimeSlot.start_minute.asc()).all()

    @staticmethod
    def get_time_slot(db: Session, time_slot_id: str) -> Optional[TimeSlot]:
        return db.query(TimeSlot).filter(TimeSlot.id == time_slot_id).first()

    @staticmethod
    def find_by_window(
        db: Session, start_minute: int, end_minute: int, exclude_id: Optional[str] = None
    ) -> Optional[TimeSlot]:
        query = db.query(TimeSlot).filter(
            TimeSlot.start_minute == start_minute, TimeSlot.end_minute == end_minute
        )
        if exclude_id:
            query = query.filter(TimeSlot.id != exclude_id)
        return query.first()

    @staticmethod
    def max_order(db: Session) -> int:
        return db.query(func.max(TimeSlot.order)).scalar() or 0

    @staticmethod
    def count_time_slots(db: Session) -> int:
        return db.query(func.count(TimeSlot.id)).scalar() or 0

    @staticmethod
    def count_jobs_for_slot(db: Session, time_slot_id: str) -> int:
        return db.query(func.count(Job.id)).filter(Job.time_slot_id == time_slot_id).scalar() or 0

    @staticmethod
    def create_time_slot(db: Session, **slot_data) -> TimeSlot:
        time_slot = TimeSlot(**slot_data)
        db.add(time_slot)
        db.commit()
        db.refresh(time_slot)
        return time_slot

    @staticmethod
    def bulk_create(db: Session, slots: list[dict]) -> int:
        db.add_all([TimeSlot(**slot_data) for slot_data in slots])
        db.commit()
        return len(slots)

    @staticmethod
    def update_time_slot(db: Session, time_slot: TimeSlot, **updates) -> TimeSlot:
        for key, value in updates.items():
            if value is not None and hasattr(time_slot, key):
                setattr(time_slot, key, value)
        db.commit()
        db.refresh(time_slot)
        return time_slot

    @staticmethod
    def delete_time_slot(db: Session, time_slot: TimeSlot) -> None:
        db.delete(time_slot)
        db.commit()
