"""Scheduling repository - Database operations for technicians and jobs"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Job, JobStatus, Technician, TimeSlot
from ...shared.time_window import TimeWindow, local_now
from .filters import JobFilter


class SchedulingRepository:
    """Repository for technician and job database operations"""

    # ------------------------------------------------------------------
    # Technicians
    # ------------------------------------------------------------------

    @staticmethod
    def find_technician(
        db: Session, technician_id: str, for_update: bool = False
    ) -> Optional[Technician]:
        """Get a technician by ID, optionally locking the row until commit"""
        query = db.query(Technician).filter(Technician.id == technician_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def list_active_technicians(db: Session) -> list[Technician]:
        return (
            db.query(Technician)
            .filter(Technician.is_active.is_(True))
            .order_by(Technician.name.asc())
            .all()
        )

    @staticmethod
    def create_technician(
        db: Session,
        name: str,
        phone: str,
        email: Optional[str] = None,
        address: Optional[str] = None,
        working_window: Optional[TimeWindow] = None,
        is_active: bool = True,
    ) -> Technician:
        """Create a technician; phone uniqueness is enforced by the table"""
        technician = Technician(
            name=name,
            phone=phone,
            email=email,
            address=address,
            is_active=is_active,
            work_start_minute=working_window.start if working_window else None,
            work_end_minute=working_window.end if working_window else None,
        )
        db.add(technician)
        db.commit()
        db.refresh(technician)
        return technician

    @staticmethod
    def count_technicians(db: Session, active_only: bool = False) -> int:
        query = db.query(func.count(Technician.id))
        if active_only:
            query = query.filter(Technician.is_active.is_(True))
        return query.scalar() or 0

    # ------------------------------------------------------------------
    # Time slots
    # ------------------------------------------------------------------

    @staticmethod
    def find_time_slot(db: Session, time_slot_id: str) -> Optional[TimeSlot]:
        return db.query(TimeSlot).filter(TimeSlot.id == time_slot_id).first()

    @staticmethod
    def list_active_time_slots(db: Session) -> list[TimeSlot]:
        return (
            db.query(TimeSlot)
            .filter(TimeSlot.is_active.is_(True))
            .order_by(TimeSlot.order.asc(), TimeSlot.start_minute.asc())
            .all()
        )

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    @staticmethod
    def find_job(db: Session, job_id: str) -> Optional[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.technician), joinedload(Job.time_slot))
            .filter(Job.id == job_id)
            .first()
        )

    @staticmethod
    def find_conflicting_job(
        db: Session,
        technician_id: str,
        scheduled_date: date,
        time_slot_id: str,
        status: JobStatus = JobStatus.ASSIGNED,
        exclude_job_id: Optional[str] = None,
    ) -> Optional[Job]:
        """Find a job occupying the (technician, date, slot) triple in the given status"""
        query = db.query(Job).filter(
            Job.technician_id == technician_id,
            Job.scheduled_date == scheduled_date,
            Job.time_slot_id == time_slot_id,
            Job.status == status.value,
        )
        if exclude_job_id:
            query = query.filter(Job.id != exclude_job_id)
        return query.first()

    @staticmethod
    def booked_technician_ids(db: Session, scheduled_date: date, time_slot_id: str) -> set[str]:
        """IDs of technicians holding an ASSIGNED job in this slot on this date"""
        rows = (
            db.query(Job.technician_id)
            .filter(
                Job.scheduled_date == scheduled_date,
                Job.time_slot_id == time_slot_id,
                Job.status == JobStatus.ASSIGNED.value,
            )
            .all()
        )
        return {row.technician_id for row in rows}

    @staticmethod
    def booked_time_slot_ids(db: Session, technician_id: str, scheduled_date: date) -> set[str]:
        """IDs of slots in which this technician holds an ASSIGNED job on this date"""
        rows = (
            db.query(Job.time_slot_id)
            .filter(
                Job.technician_id == technician_id,
                Job.scheduled_date == scheduled_date,
                Job.status == JobStatus.ASSIGNED.value,
            )
            .all()
        )
        return {row.time_slot_id for row in rows}

    @staticmethod
    def create_job(db: Session, **job_data) -> Job:
        """Stage a new job in the current transaction; the caller commits"""
        job = Job(**job_data)
        db.add(job)
        db.flush()
        return job

    @staticmethod
    def update_job_status(
        db: Session,
        job_ids: list[str],
        status: JobStatus,
        from_status: JobStatus = JobStatus.ASSIGNED,
        stamp: Optional[datetime] = None,
    ) -> int:
        """
        Move jobs from ``from_status`` to ``status`` in one statement.

        Rows already past ``from_status`` are left untouched, so repeating the
        call is a no-op. Returns the number of rows changed; the caller commits.
        """
        if not job_ids:
            return 0
        return (
            db.query(Job)
            .filter(Job.id.in_(job_ids), Job.status == from_status.value)
            .update(
                {Job.status: status.value, Job.updated_at: stamp or local_now()},
                synchronize_session=False,
            )
        )

    @staticmethod
    def update_job(db: Session, job: Job, **updates) -> Job:
        for key, value in updates.items():
            if hasattr(job, key):
                setattr(job, key, value)
        db.flush()
        return job

    @staticmethod
    def delete_job(db: Session, job: Job) -> None:
        db.delete(job)
        db.commit()

    @staticmethod
    def list_jobs(db: Session, job_filter: JobFilter, page: int, limit: int) -> list[Job]:
        """Newest-created first, ``page`` is 1-indexed"""
        query = db.query(Job).options(joinedload(Job.technician), joinedload(Job.time_slot))
        if job_filter.needs_technician_join:
            query = query.join(Technician, Job.technician_id == Technician.id)
        query = query.filter(*job_filter.criteria())
        return (
            query.order_by(Job.created_at.desc(), Job.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

    @staticmethod
    def count_jobs(db: Session, job_filter: JobFilter) -> int:
        query = db.query(func.count(Job.id)).select_from(Job)
        if job_filter.needs_technician_join:
            query = query.join(Technician, Job.technician_id == Technician.id)
        return query.filter(*job_filter.criteria()).scalar() or 0

    @staticmethod
    def count_jobs_in_statuses(
        db: Session, statuses: list[JobStatus], job_filter: JobFilter
    ) -> int:
        """Count jobs matching the filter whose status is any of ``statuses``"""
        query = db.query(func.count(Job.id)).select_from(Job)
        if job_filter.needs_technician_join:
            query = query.join(Technician, Job.technician_id == Technician.id)
        return (
            query.filter(Job.status.in_([status.value for status in statuses]))
            .filter(*job_filter.criteria())
            .scalar()
            or 0
        )
