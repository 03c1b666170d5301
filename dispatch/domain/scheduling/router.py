"""Scheduling router - FastAPI endpoints for jobs, availability and stats"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Job, JobStatus, Technician, TimeSlot
from ...services.address_resolver import AddressResolver
from ...services.notification_service import Notifier
from ...shared.time_window import format_minutes, local_now
from ..preferences.router import get_preferences_service
from ..preferences.service import PreferencesService
from .availability_service import AvailabilityChecker
from .errors import SchedulingError
from .filters import DateRange, JobFilter
from .query_service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, JobQueryService
from .scheduler_service import JobScheduler
from .schemas import (
    Coordinates,
    JobCreate,
    JobCreatedResponse,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
    JobUpdate,
    MessageResponse,
    PaginationMeta,
    SlotAvailabilityResponse,
    StatusCounts,
    TechnicianStatsResponse,
    TechnicianSummary,
    TimeSlotSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/jobs", tags=["Jobs"])


# ============================================================================
# DEPENDENCIES
# ============================================================================


def get_clock() -> Callable[[], datetime]:
    return local_now


def get_address_resolver() -> AddressResolver:
    return AddressResolver()


def get_notifier() -> Notifier:
    return Notifier()


def get_job_scheduler(
    db: Session = Depends(get_db),
    resolver: AddressResolver = Depends(get_address_resolver),
    notifier: Notifier = Depends(get_notifier),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> JobScheduler:
    """Dependency injection for JobScheduler"""
    return JobScheduler(db, resolver, notifier, clock=clock)


def get_query_service(
    db: Session = Depends(get_db), clock: Callable[[], datetime] = Depends(get_clock)
) -> JobQueryService:
    return JobQueryService(db, clock=clock)


def get_availability_checker(
    db: Session = Depends(get_db), clock: Callable[[], datetime] = Depends(get_clock)
) -> AvailabilityChecker:
    return AvailabilityChecker(db, clock=clock)


# ============================================================================
# SERIALIZATION
# ============================================================================


def error_response(error: SchedulingError) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content=error.to_payload())


def technician_summary(technician: Technician) -> TechnicianSummary:
    return TechnicianSummary(
        id=technician.id,
        name=technician.name,
        phone=technician.phone,
        email=technician.email,
        workStartTime=(
            format_minutes(technician.work_start_minute)
            if technician.work_start_minute is not None
            else None
        ),
        workEndTime=(
            format_minutes(technician.work_end_minute)
            if technician.work_end_minute is not None
            else None
        ),
    )


def time_slot_summary(time_slot: TimeSlot) -> TimeSlotSummary:
    return TimeSlotSummary(
        id=time_slot.id,
        label=time_slot.label,
        startTime=time_slot.start_time,
        endTime=time_slot.end_time,
    )


def job_to_response(job: Job) -> JobResponse:
    coordinates = None
    if job.latitude is not None and job.longitude is not None:
        coordinates = Coordinates(lat=job.latitude, lng=job.longitude)

    return JobResponse(
        id=job.id,
        customerName=job.customer_name,
        customerPhone=job.customer_phone,
        customerEmail=job.customer_email,
        serviceAddress=job.service_address,
        street=job.street,
        city=job.city,
        state=job.state,
        stateCode=job.state_code,
        zipCode=job.zip_code,
        coordinates=coordinates,
        jobDescription=job.job_description,
        scheduledDate=job.scheduled_date,
        status=JobStatus(job.status),
        technicianId=job.technician_id,
        timeSlotId=job.time_slot_id,
        technician=technician_summary(job.technician) if job.technician else None,
        timeSlot=time_slot_summary(job.time_slot) if job.time_slot else None,
        createdAt=job.created_at,
        updatedAt=job.updated_at,
    )


# ============================================================================
# BOOKING
# ============================================================================


@router.post("", response_model=JobCreatedResponse, status_code=201)
async def create_job(
    data: JobCreate,
    scheduler: JobScheduler = Depends(get_job_scheduler),
    preferences: PreferencesService = Depends(get_preferences_service),
):
    """Book a job; DOUBLE_BOOKED and OUTSIDE_WORKING_HOURS come back as 409"""
    settings = preferences.snapshot()
    result = await scheduler.create_job(data, settings)
    if not result.ok:
        return error_response(result.error)

    scheduled = result.value
    return JobCreatedResponse(
        job=job_to_response(scheduled.job),
        notifications=scheduled.notifications.to_dict(),
    )


# ============================================================================
# LISTING AND STATS
# ============================================================================


@router.get("", response_model=JobListResponse)
async def list_jobs(
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    zip_code: Optional[str] = Query(None, alias="zipCode"),
    customer_name: Optional[str] = Query(None, alias="customerName"),
    customer_phone: Optional[str] = Query(None, alias="customerPhone"),
    customer_email: Optional[str] = Query(None, alias="customerEmail"),
    technician_id: Optional[str] = Query(None, alias="technicianId"),
    time_slot_id: Optional[str] = Query(None, alias="timeSlotId"),
    status: Optional[JobStatus] = Query(None),
    scheduled_date: Optional[date] = Query(None, alias="date"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: JobQueryService = Depends(get_query_service),
):
    """Paginated job list, newest first; ``date`` pins a single scheduled day"""
    scheduled = None
    if scheduled_date:
        scheduled = DateRange(scheduled_date, scheduled_date)
    elif start_date or end_date:
        scheduled = DateRange(start_date, end_date)

    job_filter = JobFilter(
        city=city,
        state=state,
        zip_code=zip_code,
        customer_name=customer_name,
        customer_phone=customer_phone,
        customer_email=customer_email,
        technician_id=technician_id,
        time_slot_id=time_slot_id,
        status=status,
        scheduled=scheduled,
        search=search,
    )
    paged = service.list_jobs(job_filter, page=page, limit=limit)
    pagination = paged.pagination

    return JobListResponse(
        jobs=[job_to_response(job) for job in paged.jobs],
        pagination=PaginationMeta(
            currentPage=pagination.current_page,
            totalPages=pagination.total_pages,
            totalCount=pagination.total_count,
            limit=pagination.limit,
            hasNextPage=pagination.has_next_page,
            hasPrevPage=pagination.has_prev_page,
        ),
    )


@router.get("/stats", response_model=JobStatsResponse)
async def get_stats(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    service: JobQueryService = Depends(get_query_service),
):
    """Dashboard totals, optionally limited to jobs created in a date range"""
    created = DateRange(start_date, end_date) if start_date or end_date else None
    stats = service.get_stats(created)
    return JobStatsResponse(
        totalJobs=stats.total_jobs,
        assignedJobs=stats.assigned_jobs,
        completedJobs=stats.completed_jobs,
        pendingJobs=stats.pending_jobs,
        totalTechnicians=stats.total_technicians,
        activeTechnicians=stats.active_technicians,
        jobsThisWeek=stats.jobs_this_week,
        completionRate=stats.completion_rate,
        efficiency=stats.efficiency,
    )


@router.get("/technicians/{technician_id}/stats", response_model=TechnicianStatsResponse)
async def get_technician_stats(
    technician_id: str,
    service: JobQueryService = Depends(get_query_service),
):
    result = service.get_technician_stats(technician_id)
    if not result.ok:
        return error_response(result.error)

    stats = result.value

    def counts(value) -> StatusCounts:
        return StatusCounts(
            assigned=value.assigned,
            completed=value.completed,
            pending=value.pending,
            completionRate=value.completion_rate,
        )

    return TechnicianStatsResponse(
        technician=technician_summary(stats.technician),
        today=counts(stats.today),
        overall=counts(stats.overall),
    )


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/available-technicians", response_model=list[TechnicianSummary])
async def list_available_technicians(
    scheduled_date: date = Query(..., alias="scheduledDate"),
    time_slot_id: str = Query(..., alias="timeSlotId"),
    apply_working_hours: bool = Query(False, alias="applyWorkingHours"),
    checker: AvailabilityChecker = Depends(get_availability_checker),
):
    """Active technicians free in the slot; working hours only with ``applyWorkingHours``"""
    result = checker.list_available_technicians(
        scheduled_date, time_slot_id, apply_working_hours=apply_working_hours
    )
    if not result.ok:
        return error_response(result.error)
    return [technician_summary(technician) for technician in result.value]


@router.get("/available-slots", response_model=list[SlotAvailabilityResponse])
async def list_available_slots(
    scheduled_date: date = Query(..., alias="scheduledDate"),
    technician_id: str = Query(..., alias="technicianId"),
    checker: AvailabilityChecker = Depends(get_availability_checker),
):
    result = checker.list_available_slots(technician_id, scheduled_date)
    if not result.ok:
        return error_response(result.error)
    return [
        SlotAvailabilityResponse(
            timeSlot=time_slot_summary(slot.time_slot),
            available=slot.available,
            reason=slot.reason,
        )
        for slot in result.value
    ]


# ============================================================================
# SINGLE JOB
# ============================================================================


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, service: JobQueryService = Depends(get_query_service)):
    result = service.get_job(job_id)
    if not result.ok:
        return error_response(result.error)
    return job_to_response(result.value)


@router.patch("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    data: JobUpdate,
    scheduler: JobScheduler = Depends(get_job_scheduler),
):
    result = await scheduler.update_job(job_id, data)
    if not result.ok:
        return error_response(result.error)
    return job_to_response(result.value)


@router.post("/{job_id}/complete", response_model=JobResponse)
async def complete_job(job_id: str, scheduler: JobScheduler = Depends(get_job_scheduler)):
    """Mark a job completed; repeating the call is harmless"""
    result = scheduler.complete_job(job_id)
    if not result.ok:
        return error_response(result.error)
    return job_to_response(result.value)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, scheduler: JobScheduler = Depends(get_job_scheduler)):
    """Delete a job whose slot is over; live jobs answer 409 SLOT_STILL_ACTIVE"""
    result = scheduler.delete_job(job_id)
    if not result.ok:
        return error_response(result.error)
    return result.value
