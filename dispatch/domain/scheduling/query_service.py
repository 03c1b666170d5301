"""Job query service - listing, single reads and statistics"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import Job, JobStatus, Technician
from ...shared.time_window import local_now
from .completion import complete_due_matching, complete_if_due
from .errors import Result, SchedulingError
from .filters import DateRange, JobFilter
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

BOOKED_STATUSES = [JobStatus.ASSIGNED, JobStatus.COMPLETED]


def percentage(numerator: int, denominator: int) -> float:
    """Percentage rounded to 2 decimals, 0 when there is nothing to divide by"""
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100, 2)


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_count: int
    limit: int

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1


@dataclass(frozen=True)
class PagedJobs:
    jobs: list[Job]
    pagination: Pagination


@dataclass(frozen=True)
class JobStats:
    total_jobs: int
    assigned_jobs: int
    completed_jobs: int
    pending_jobs: int
    total_technicians: int
    active_technicians: int
    jobs_this_week: int
    completion_rate: float
    efficiency: float


@dataclass(frozen=True)
class StatusCounts:
    assigned: int
    completed: int

    @property
    def pending(self) -> int:
        return self.assigned - self.completed

    @property
    def completion_rate(self) -> float:
        return percentage(self.completed, self.assigned)


@dataclass(frozen=True)
class TechnicianStats:
    technician: Technician
    today: StatusCounts
    overall: StatusCounts


class JobQueryService:
    """Read side of the scheduling domain"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = local_now):
        self.db = db
        self.repo = SchedulingRepository()
        self.clock = clock

    def get_job(self, job_id: str) -> Result[Job]:
        """A single job, completed on the fly if its slot has elapsed"""
        job = self.repo.find_job(self.db, job_id)
        if not job:
            return Result.failure(SchedulingError.not_found("Job", job_id))
        complete_if_due(self.db, [job], self.clock())
        return Result.success(job)

    def list_jobs(
        self,
        job_filter: Optional[JobFilter] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> PagedJobs:
        """Newest-created jobs first, one page at a time"""
        job_filter = job_filter or JobFilter()
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)

        complete_due_matching(self.db, job_filter, self.clock())
        total_count = self.repo.count_jobs(self.db, job_filter)
        jobs = self.repo.list_jobs(self.db, job_filter, page, limit)

        pagination = Pagination(
            current_page=page,
            total_pages=math.ceil(total_count / limit) if total_count else 0,
            total_count=total_count,
            limit=limit,
        )
        return PagedJobs(jobs=jobs, pagination=pagination)

    def get_stats(self, created: Optional[DateRange] = None) -> JobStats:
        """
        Aggregate job and technician counts, optionally limited to jobs
        created within ``created``.

        ``pending_jobs`` is assigned minus completed, not a status count; it
        can go negative for some date ranges.
        """
        base = JobFilter(created=created)
        total = self.repo.count_jobs(self.db, base)
        assigned = self.repo.count_jobs(
            self.db, JobFilter(created=created, status=JobStatus.ASSIGNED)
        )
        completed = self.repo.count_jobs(
            self.db, JobFilter(created=created, status=JobStatus.COMPLETED)
        )

        today = self.clock().date()
        week_start = today - timedelta(days=today.weekday())
        jobs_this_week = self.repo.count_jobs_in_statuses(
            self.db,
            BOOKED_STATUSES,
            JobFilter(created=DateRange(week_start, week_start + timedelta(days=6))),
        )

        stats = JobStats(
            total_jobs=total,
            assigned_jobs=assigned,
            completed_jobs=completed,
            pending_jobs=assigned - completed,
            total_technicians=self.repo.count_technicians(self.db),
            active_technicians=self.repo.count_technicians(self.db, active_only=True),
            jobs_this_week=jobs_this_week,
            completion_rate=percentage(completed, total),
            efficiency=percentage(completed, assigned + completed),
        )
        logger.debug(f"📊 Job stats computed: {stats}")
        return stats

    def get_technician_stats(self, technician_id: str) -> Result[TechnicianStats]:
        """Booked and completed counts for today and all time"""
        technician = self.repo.find_technician(self.db, technician_id)
        if not technician:
            return Result.failure(SchedulingError.not_found("Technician", technician_id))

        today = self.clock().date()
        todays = DateRange(today, today)

        def counts(scheduled: Optional[DateRange]) -> StatusCounts:
            return StatusCounts(
                assigned=self.repo.count_jobs_in_statuses(
                    self.db,
                    BOOKED_STATUSES,
                    JobFilter(technician_id=technician_id, scheduled=scheduled),
                ),
                completed=self.repo.count_jobs(
                    self.db,
                    JobFilter(
                        technician_id=technician_id,
                        scheduled=scheduled,
                        status=JobStatus.COMPLETED,
                    ),
                ),
            )

        return Result.success(
            TechnicianStats(technician=technician, today=counts(todays), overall=counts(None))
        )
