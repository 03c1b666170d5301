import enum
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .shared.time_window import TimeWindow, format_minutes, local_now

PREFERENCES_ID = "singleton"


def generate_id():
    """Generate a UUID primary key"""
    return str(uuid.uuid4())


class JobStatus(str, enum.Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = [JobStatus.PENDING, JobStatus.ASSIGNED, JobStatus.COMPLETED]


class TimeSlot(Base):
    """A named window of the working day offered to customers"""

    __tablename__ = "time_slots"

    id = Column(String(36), primary_key=True, default=generate_id)
    label = Column(String(100), nullable=False)
    start_minute = Column(Integer, nullable=False)  # minutes since midnight
    end_minute = Column(Integer, nullable=False)
    order = Column(Integer, nullable=False, default=0)  # display rank
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=local_now, nullable=False)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)

    jobs = relationship("Job", back_populates="time_slot")

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_minute, self.end_minute)

    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minute)


class Technician(Base):
    __tablename__ = "technicians"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), unique=True, nullable=False)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Working hours; both set or both null
    work_start_minute = Column(Integer, nullable=True)
    work_end_minute = Column(Integer, nullable=True)

    created_at = Column(DateTime, default=local_now, nullable=False)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)

    jobs = relationship("Job", back_populates="technician")

    @property
    def working_window(self):
        if self.work_start_minute is None or self.work_end_minute is None:
            return None
        return TimeWindow(self.work_start_minute, self.work_end_minute)


class Job(Base):
    """A customer service visit booked against a technician and a slot on a date"""

    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=generate_id)

    # Customer
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    customer_email = Column(String(255), nullable=True)

    # Location
    service_address = Column(Text, nullable=False)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    state_code = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    job_description = Column(Text, nullable=True)

    # Booking
    scheduled_date = Column(Date, nullable=False)
    time_slot_id = Column(String(36), ForeignKey("time_slots.id"), nullable=False)
    technician_id = Column(String(36), ForeignKey("technicians.id"), nullable=False)

    # Status workflow: PENDING → ASSIGNED → COMPLETED
    status = Column(String(20), default=JobStatus.ASSIGNED.value, nullable=False)

    created_at = Column(DateTime, default=local_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)

    technician = relationship("Technician", back_populates="jobs")
    time_slot = relationship("TimeSlot", back_populates="jobs")

    __table_args__ = (
        # At most one active booking per (technician, date, slot)
        Index(
            "uq_jobs_active_booking",
            "technician_id",
            "scheduled_date",
            "time_slot_id",
            unique=True,
            postgresql_where=text("status = 'ASSIGNED'"),
            sqlite_where=text("status = 'ASSIGNED'"),
        ),
        Index("ix_jobs_status_scheduled_date", "status", "scheduled_date"),
    )


class NotificationPreferences(Base):
    """Single-row table holding the operator's notification toggles"""

    __tablename__ = "notification_preferences"

    id = Column(String(20), primary_key=True, default=PREFERENCES_ID)
    send_customer_email = Column(Boolean, default=True, nullable=False)
    send_technician_sms = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=local_now, nullable=False)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)
