"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import JobStatus
from ...shared.validators import validate_email


class JobCreate(BaseModel):
    """Schema for booking a new job"""

    customerName: str = Field(min_length=1)
    customerPhone: str = Field(min_length=1)
    customerEmail: Optional[str] = None
    serviceAddress: str = Field(min_length=1)
    zipCode: Optional[str] = None
    jobDescription: Optional[str] = None
    scheduledDate: date
    # Checked by the scheduler so a missing id reports MISSING_FIELD
    timeSlotId: Optional[str] = None
    technicianId: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("customerEmail")
    @classmethod
    def validate_customer_email(cls, v):
        return validate_email(v) if v else None


class JobUpdate(BaseModel):
    """Schema for updating an existing job"""

    customerName: Optional[str] = None
    customerPhone: Optional[str] = None
    customerEmail: Optional[str] = None
    serviceAddress: Optional[str] = None
    zipCode: Optional[str] = None
    jobDescription: Optional[str] = None
    scheduledDate: Optional[date] = None
    timeSlotId: Optional[str] = None
    technicianId: Optional[str] = None
    status: Optional[JobStatus] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    @field_validator("customerEmail")
    @classmethod
    def validate_customer_email(cls, v):
        return validate_email(v) if v else None


class Coordinates(BaseModel):
    lat: float
    lng: float


class TechnicianSummary(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    workStartTime: Optional[str] = None
    workEndTime: Optional[str] = None


class TimeSlotSummary(BaseModel):
    id: str
    label: str
    startTime: str
    endTime: str


class JobResponse(BaseModel):
    id: str
    customerName: str
    customerPhone: str
    customerEmail: Optional[str] = None
    serviceAddress: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    stateCode: Optional[str] = None
    zipCode: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    jobDescription: Optional[str] = None
    scheduledDate: date
    status: JobStatus
    technicianId: str
    timeSlotId: str
    technician: Optional[TechnicianSummary] = None
    timeSlot: Optional[TimeSlotSummary] = None
    createdAt: datetime
    updatedAt: datetime


class DeliveryStatusResponse(BaseModel):
    sent: bool
    message: str


class NotificationStatusResponse(BaseModel):
    emailStatus: DeliveryStatusResponse
    smsStatus: DeliveryStatusResponse


class JobCreatedResponse(BaseModel):
    job: JobResponse
    notifications: NotificationStatusResponse


class PaginationMeta(BaseModel):
    currentPage: int
    totalPages: int
    totalCount: int
    limit: int
    hasNextPage: bool
    hasPrevPage: bool


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    pagination: PaginationMeta


class JobStatsResponse(BaseModel):
    totalJobs: int
    assignedJobs: int
    completedJobs: int
    pendingJobs: int
    totalTechnicians: int
    activeTechnicians: int
    jobsThisWeek: int
    completionRate: float
    efficiency: float


class StatusCounts(BaseModel):
    assigned: int
    completed: int
    pending: int
    completionRate: float


class TechnicianStatsResponse(BaseModel):
    technician: TechnicianSummary
    today: StatusCounts
    overall: StatusCounts


class SlotAvailabilityResponse(BaseModel):
    timeSlot: TimeSlotSummary
    available: bool
    reason: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
