"""Shared test fixtures and helpers."""

import itertools
import os
import tempfile
from datetime import date, datetime
from typing import Optional

# Settings are read at import time; keep tests off the network and the real database
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'dispatch-test.db')}"
)
os.environ["SWEEPER_ENABLED"] = "false"
os.environ["SEED_DEFAULT_TIME_SLOTS"] = "false"
os.environ["GEOCODING_ENABLED"] = "false"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import asyncio  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from dispatch.database import Base, build_engine, get_db  # noqa: E402
from dispatch.domain.scheduling.repository import SchedulingRepository  # noqa: E402
from dispatch.models import Job, JobStatus, Technician, TimeSlot  # noqa: E402
from dispatch.services.address_resolver import GeoPoint, parse_address  # noqa: E402
from dispatch.services.notification_service import Notifier  # noqa: E402
from dispatch.shared.time_window import TimeWindow, generate_time_label, to_minutes  # noqa: E402

# Wednesday; the week runs Monday 2030-06-10 to Sunday 2030-06-16
NOW = datetime(2030, 6, 12, 9, 0)
TODAY = NOW.date()

_phones = itertools.count(1000)


class FixedClock:
    """Callable clock whose time tests move by assigning ``now``"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeResolver:
    """Real address parsing, canned geocoding"""

    def __init__(self, point: Optional[GeoPoint] = None, delay: float = 0):
        self.point = point
        self.delay = delay
        self.geocoded = []

    def parse_address(self, raw: str):
        return parse_address(raw)

    async def geocode(self, raw: str) -> Optional[GeoPoint]:
        self.geocoded.append(raw)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.point


class RecordingSenders:
    """Stand-ins for the email and SMS transports that record what they were asked to send"""

    def __init__(self, fail_email: bool = False, sms_error: Optional[str] = None):
        self.fail_email = fail_email
        self.sms_error = sms_error
        self.emails = []
        self.texts = []

    async def send_email(self, **kwargs):
        if self.fail_email:
            raise RuntimeError("provider down")
        self.emails.append(kwargs)
        return {"id": "email-1"}

    async def send_sms(self, to_phone: str, message_body: str):
        self.texts.append((to_phone, message_body))
        if self.sms_error:
            return False, self.sms_error
        return True, None


# ----------------------------------------------------------------------------
# Database
# ----------------------------------------------------------------------------


@pytest.fixture
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'dispatch.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# ----------------------------------------------------------------------------
# Collaborators
# ----------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def resolver():
    return FakeResolver(point=GeoPoint(latitude=39.7817, longitude=-89.6501))


@pytest.fixture
def senders():
    return RecordingSenders()


@pytest.fixture
def notifier(senders):
    return Notifier(email_sender=senders.send_email, sms_sender=senders.send_sms)


@pytest_asyncio.fixture
async def client(session_factory, clock, resolver, notifier):
    """Async client over the app with the database and collaborators swapped for test doubles"""
    from dispatch.domain.scheduling import router as scheduling_router
    from dispatch.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[scheduling_router.get_clock] = lambda: clock
    app.dependency_overrides[scheduling_router.get_address_resolver] = lambda: resolver
    app.dependency_overrides[scheduling_router.get_notifier] = lambda: notifier

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as async_client:
        yield async_client

    app.dependency_overrides.clear()


# ----------------------------------------------------------------------------
# Factories
# ----------------------------------------------------------------------------


def make_technician(
    db,
    name: str = "Alex Rivera",
    hours: Optional[tuple[str, str]] = None,
    is_active: bool = True,
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> Technician:
    return SchedulingRepository.create_technician(
        db,
        name=name,
        phone=phone or f"(217) 555-{next(_phones):04d}",
        email=email,
        working_window=TimeWindow.parse(*hours) if hours else None,
        is_active=is_active,
    )


def make_slot(
    db, start: str = "08:00", end: str = "10:00", order: int = 1, is_active: bool = True
) -> TimeSlot:
    start_minute, end_minute = to_minutes(start), to_minutes(end)
    slot = TimeSlot(
        label=generate_time_label(start_minute, end_minute),
        start_minute=start_minute,
        end_minute=end_minute,
        order=order,
        is_active=is_active,
    )
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return slot


def make_job(
    db,
    technician: Technician,
    slot: TimeSlot,
    scheduled_date: date = TODAY,
    status: JobStatus = JobStatus.ASSIGNED,
    created_at: Optional[datetime] = None,
    **fields,
) -> Job:
    data = {
        "customer_name": "Jordan Lee",
        "customer_phone": "(217) 555-0199",
        "customer_email": "jordan@example.com",
        "service_address": "123 Main St, Springfield, IL 62701",
        "city": "Springfield",
        "state": "Illinois",
        "state_code": "IL",
        "zip_code": "62701",
    }
    data.update(fields)
    job = Job(
        technician_id=technician.id,
        time_slot_id=slot.id,
        scheduled_date=scheduled_date,
        status=status.value,
        **data,
    )
    if created_at is not None:
        job.created_at = created_at
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def job_payload(
    technician: Optional[Technician],
    slot: Optional[TimeSlot],
    scheduled_date: date = TODAY,
    **overrides,
) -> dict:
    payload = {
        "customerName": "Jordan Lee",
        "customerPhone": "(217) 555-0199",
        "customerEmail": "jordan@example.com",
        "serviceAddress": "123 Main St, Springfield, IL 62701",
        "jobDescription": "Deep clean, two bedrooms",
        "scheduledDate": scheduled_date.isoformat(),
        "technicianId": technician.id if technician else None,
        "timeSlotId": slot.id if slot else None,
    }
    payload.update(overrides)
    return payload
