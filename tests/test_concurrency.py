"""Concurrent bookings for the same technician, date and slot."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

from conftest import (
    FakeResolver,
    FixedClock,
    RecordingSenders,
    job_payload,
    make_slot,
    make_technician,
)

from dispatch.domain.preferences.schemas import NotificationSettings
from dispatch.domain.scheduling.errors import ErrorKind
from dispatch.domain.scheduling.scheduler_service import JobScheduler
from dispatch.domain.scheduling.schemas import JobCreate
from dispatch.models import Job, JobStatus
from dispatch.services.notification_service import Notifier

WORKERS = 8


def test_exactly_one_concurrent_booking_wins(db, session_factory):
    technician = make_technician(db)
    slot = make_slot(db)
    payloads = [
        JobCreate(**job_payload(technician, slot, customerName=f"Customer {index}"))
        for index in range(WORKERS)
    ]
    barrier = threading.Barrier(WORKERS)

    def book(data):
        session = session_factory()
        senders = RecordingSenders()
        scheduler = JobScheduler(
            session,
            FakeResolver(),
            Notifier(email_sender=senders.send_email, sms_sender=senders.send_sms),
            clock=FixedClock(),
        )
        try:
            barrier.wait()
            return asyncio.run(scheduler.create_job(data, NotificationSettings()))
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=WORKERS) as pool:
        results = list(pool.map(book, payloads))

    winners = [result for result in results if result.ok]
    losers = [result for result in results if not result.ok]
    assert len(winners) == 1
    assert len(losers) == WORKERS - 1
    assert {result.error.kind for result in losers} == {ErrorKind.DOUBLE_BOOKED}

    db.expire_all()
    assigned = db.query(Job).filter(Job.status == JobStatus.ASSIGNED.value).all()
    assert len(assigned) == 1
    assert assigned[0].id == winners[0].value.job.id
