"""
Job auto-completion.

A job is due for completion once its whole slot lies in the past: any
ASSIGNED job scheduled before today, or scheduled today with a slot whose
end minute is strictly behind the clock. The periodic sweep and the lazy
path on reads both go through ``CompletionCutoff`` so they can never
disagree about which jobs qualify.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ...models import Job, JobStatus, Technician, TimeSlot
from ...shared.time_window import TimeWindow, local_now, minute_of_day
from .filters import JobFilter
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionCutoff:
    """The instant against which slot elapse is judged"""

    today: date
    now_minutes: int

    @classmethod
    def at(cls, moment: datetime) -> "CompletionCutoff":
        return cls(today=moment.date(), now_minutes=minute_of_day(moment))

    def has_elapsed(self, scheduled_date: date, window: TimeWindow) -> bool:
        if scheduled_date < self.today:
            return True
        if scheduled_date == self.today:
            return window.has_ended(self.now_minutes)
        return False

    def is_due(self, job: Job) -> bool:
        return job.status == JobStatus.ASSIGNED.value and self.has_elapsed(
            job.scheduled_date, job.time_slot.window
        )

    def clause(self):
        """SQL form of ``is_due``; the query must join TimeSlot"""
        return and_(
            Job.status == JobStatus.ASSIGNED.value,
            or_(
                Job.scheduled_date < self.today,
                and_(
                    Job.scheduled_date == self.today,
                    TimeSlot.end_minute < self.now_minutes,
                ),
            ),
        )


@dataclass
class SweepSummary:
    completed: int = 0
    job_ids: list[str] = field(default_factory=list)


def complete_elapsed_jobs(db: Session, moment: Optional[datetime] = None) -> SweepSummary:
    """
    Bulk-complete every ASSIGNED job whose slot has elapsed.

    Safe to run concurrently with itself and with the lazy path: the update
    only touches rows still ASSIGNED, so a second pass changes nothing.
    """
    moment = moment or local_now()
    cutoff = CompletionCutoff.at(moment)

    due_ids = [
        row.id
        for row in db.query(Job.id)
        .join(TimeSlot, Job.time_slot_id == TimeSlot.id)
        .filter(cutoff.clause())
        .all()
    ]

    if not due_ids:
        logger.debug("✅ No elapsed jobs to complete")
        return SweepSummary()

    updated = SchedulingRepository.update_job_status(
        db, due_ids, JobStatus.COMPLETED, stamp=moment
    )
    db.commit()

    for job_id in due_ids:
        logger.debug(f"🏁 Job {job_id} auto-completed")
    logger.info(f"✅ Automatically completed {updated} jobs")

    return SweepSummary(completed=updated, job_ids=due_ids)


def complete_if_due(db: Session, jobs: Iterable[Job], moment: Optional[datetime] = None) -> int:
    """
    Lazy completion for jobs about to be returned to a caller.

    Jobs that qualify are completed in the store and refreshed in place.
    """
    moment = moment or local_now()
    cutoff = CompletionCutoff.at(moment)
    due = [job for job in jobs if cutoff.is_due(job)]
    if not due:
        return 0

    updated = SchedulingRepository.update_job_status(
        db, [job.id for job in due], JobStatus.COMPLETED, stamp=moment
    )
    db.commit()
    for job in due:
        db.refresh(job)

    logger.debug(f"🏁 Lazily completed {updated} of {len(due)} due jobs")
    return updated


def complete_due_matching(
    db: Session, job_filter: JobFilter, moment: Optional[datetime] = None
) -> int:
    """
    Lazy completion for a listing, run before it is counted and paged.

    The status criterion is left out of the scope so a COMPLETED listing picks
    up jobs that only just became due.
    """
    moment = moment or local_now()
    cutoff = CompletionCutoff.at(moment)
    scope = replace(job_filter, status=None)

    query = db.query(Job.id).join(TimeSlot, Job.time_slot_id == TimeSlot.id)
    if scope.needs_technician_join:
        query = query.join(Technician, Job.technician_id == Technician.id)
    due_ids = [row.id for row in query.filter(cutoff.clause(), *scope.criteria()).all()]
    if not due_ids:
        return 0

    updated = SchedulingRepository.update_job_status(
        db, due_ids, JobStatus.COMPLETED, stamp=moment
    )
    db.commit()

    logger.debug(f"🏁 Lazily completed {updated} jobs ahead of a listing")
    return updated
