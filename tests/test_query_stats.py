"""Job listing, filtering, pagination and statistics."""

from datetime import datetime, timedelta

from conftest import NOW, TODAY, make_job, make_slot, make_technician

from dispatch.domain.scheduling.errors import ErrorKind
from dispatch.domain.scheduling.filters import DateRange, JobFilter
from dispatch.domain.scheduling.query_service import JobQueryService, percentage
from dispatch.models import JobStatus

IN_WEEK = datetime(2030, 6, 11, 12, 0)
BEFORE_WEEK = datetime(2030, 6, 1, 12, 0)


def service(db):
    return JobQueryService(db, clock=lambda: NOW)


def book_days(db, technician, slot, count, status, start_offset=1, created_at=None):
    """One job per future day so the active-booking index never trips"""
    return [
        make_job(
            db,
            technician,
            slot,
            TODAY + timedelta(days=start_offset + index),
            status=status,
            created_at=created_at,
        )
        for index in range(count)
    ]


def test_percentage():
    assert percentage(4, 10) == 40.0
    assert percentage(1, 3) == 33.33
    assert percentage(5, 0) == 0.0


def test_stats_rates_and_pending(db):
    technician = make_technician(db)
    slot = make_slot(db)
    book_days(db, technician, slot, 6, JobStatus.ASSIGNED, start_offset=1)
    book_days(db, technician, slot, 4, JobStatus.COMPLETED, start_offset=20)

    stats = service(db).get_stats()

    assert stats.total_jobs == 10
    assert stats.assigned_jobs == 6
    assert stats.completed_jobs == 4
    assert stats.completion_rate == 40.0
    assert stats.efficiency == 40.0
    assert stats.pending_jobs == 2


def test_stats_with_no_jobs(db):
    stats = service(db).get_stats()

    assert stats.total_jobs == 0
    assert stats.completion_rate == 0.0
    assert stats.efficiency == 0.0


def test_stats_counts_technicians(db):
    make_technician(db, name="Active One")
    make_technician(db, name="Active Two")
    make_technician(db, name="Retired", is_active=False)

    stats = service(db).get_stats()

    assert stats.total_technicians == 3
    assert stats.active_technicians == 2


def test_jobs_this_week_uses_creation_time(db):
    technician = make_technician(db)
    slot = make_slot(db)
    book_days(db, technician, slot, 3, JobStatus.ASSIGNED, start_offset=1, created_at=IN_WEEK)
    book_days(db, technician, slot, 1, JobStatus.PENDING, start_offset=10, created_at=IN_WEEK)
    book_days(db, technician, slot, 2, JobStatus.COMPLETED, start_offset=20, created_at=BEFORE_WEEK)

    stats = service(db).get_stats()

    assert stats.jobs_this_week == 3


def test_stats_limited_to_a_creation_range(db):
    technician = make_technician(db)
    slot = make_slot(db)
    book_days(db, technician, slot, 2, JobStatus.ASSIGNED, start_offset=1, created_at=IN_WEEK)
    book_days(db, technician, slot, 5, JobStatus.ASSIGNED, start_offset=10, created_at=BEFORE_WEEK)

    stats = service(db).get_stats(DateRange(IN_WEEK.date(), IN_WEEK.date()))

    assert stats.total_jobs == 2


def test_pagination(db):
    technician = make_technician(db)
    slot = make_slot(db)
    jobs = [
        make_job(
            db,
            technician,
            slot,
            TODAY + timedelta(days=index + 1),
            created_at=IN_WEEK + timedelta(minutes=index),
        )
        for index in range(12)
    ]

    first = service(db).list_jobs(page=1, limit=5)
    last = service(db).list_jobs(page=3, limit=5)

    assert first.pagination.total_count == 12
    assert first.pagination.total_pages == 3
    assert first.pagination.has_next_page
    assert not first.pagination.has_prev_page
    assert [job.id for job in first.jobs] == [job.id for job in reversed(jobs)][:5]
    assert len(last.jobs) == 2
    assert not last.pagination.has_next_page
    assert last.pagination.has_prev_page


def test_page_size_is_capped(db):
    paged = service(db).list_jobs(limit=500)

    assert paged.pagination.limit == 100
    assert paged.pagination.total_pages == 0


def test_filters(db):
    alex = make_technician(db, name="Alex Rivera")
    morgan = make_technician(db, name="Morgan Chen")
    slot = make_slot(db)
    springfield = make_job(db, alex, slot, TODAY + timedelta(days=1))
    austin = make_job(
        db,
        morgan,
        slot,
        TODAY + timedelta(days=2),
        customer_name="Sam Ortiz",
        service_address="500 Congress Ave, Austin, TX 78701",
        city="Austin",
        state="Texas",
        state_code="TX",
        zip_code="78701",
    )

    def ids(**criteria):
        return [job.id for job in service(db).list_jobs(JobFilter(**criteria)).jobs]

    assert ids(city="austin") == [austin.id]
    assert ids(state="TX") == [austin.id]
    assert ids(state="illinois") == [springfield.id]
    assert ids(zip_code="627") == [springfield.id]
    assert ids(customer_name="ortiz") == [austin.id]
    assert ids(technician_id=alex.id) == [springfield.id]
    assert ids(search="morgan") == [austin.id]
    assert ids(search="congress") == [austin.id]
    assert ids(scheduled=DateRange(TODAY + timedelta(days=2), None)) == [austin.id]
    assert ids(status=JobStatus.COMPLETED) == []


def test_technician_stats(db):
    technician = make_technician(db)
    morning = make_slot(db, "12:00", "14:00", order=1)
    evening = make_slot(db, "16:00", "18:00", order=2)
    make_job(db, technician, morning, TODAY, status=JobStatus.COMPLETED)
    make_job(db, technician, evening, TODAY)
    make_job(db, technician, morning, TODAY + timedelta(days=1))
    make_job(db, technician, morning, TODAY + timedelta(days=2), status=JobStatus.PENDING)

    result = service(db).get_technician_stats(technician.id)

    today, overall = result.value.today, result.value.overall
    assert (today.assigned, today.completed, today.pending) == (2, 1, 1)
    assert today.completion_rate == 50.0
    assert (overall.assigned, overall.completed, overall.pending) == (3, 1, 2)
    assert overall.completion_rate == 33.33


def test_technician_stats_unknown(db):
    result = service(db).get_technician_stats("missing")

    assert result.error.kind == ErrorKind.NOT_FOUND
