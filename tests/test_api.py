"""HTTP surface: status codes and payload shapes."""

from datetime import datetime, timedelta

import pytest
from conftest import TODAY, job_payload, make_job, make_slot, make_technician

from dispatch.models import JobStatus


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_create_job(client, db, senders):
    technician = make_technician(db, name="Alex Rivera")
    slot = make_slot(db)

    response = await client.post("/api/v1/jobs", json=job_payload(technician, slot))

    assert response.status_code == 201
    data = response.json()
    assert data["job"]["status"] == "ASSIGNED"
    assert data["job"]["technician"]["name"] == "Alex Rivera"
    assert data["job"]["timeSlot"]["label"] == "8:00 AM - 10:00 AM"
    assert data["job"]["coordinates"] == {"lat": 39.7817, "lng": -89.6501}
    assert data["notifications"]["emailStatus"]["sent"] is True
    assert data["notifications"]["smsStatus"]["sent"] is True
    assert len(senders.emails) == 1


@pytest.mark.asyncio
async def test_create_job_honours_preferences(client, db, senders):
    technician = make_technician(db)
    slot = make_slot(db)
    await client.patch("/api/v1/notification-preferences/email", json={"sendCustomerEmail": False})

    response = await client.post("/api/v1/jobs", json=job_payload(technician, slot))

    email_status = response.json()["notifications"]["emailStatus"]
    assert email_status == {"sent": False, "message": "Customer email notifications are disabled"}
    assert senders.emails == []


@pytest.mark.asyncio
async def test_double_booking_is_409(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    make_job(db, technician, slot)

    response = await client.post("/api/v1/jobs", json=job_payload(technician, slot))

    assert response.status_code == 409
    assert response.json()["code"] == "DOUBLE_BOOKED"


@pytest.mark.asyncio
async def test_outside_working_hours_is_409_with_both_windows(client, db):
    technician = make_technician(db, hours=("09:00", "17:00"))
    slot = make_slot(db, "08:00", "10:00")

    response = await client.post("/api/v1/jobs", json=job_payload(technician, slot))

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "OUTSIDE_WORKING_HOURS"
    assert body["workingHours"] == {"startTime": "09:00", "endTime": "17:00"}
    assert body["timeSlot"] == {"startTime": "08:00", "endTime": "10:00"}


@pytest.mark.asyncio
async def test_missing_ids_are_400(client):
    response = await client.post("/api/v1/jobs", json=job_payload(None, None))

    assert response.status_code == 400
    assert response.json()["code"] == "MISSING_FIELD"


@pytest.mark.asyncio
async def test_invalid_body_is_422(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    payload = job_payload(technician, slot, customerEmail="not-an-email")

    response = await client.post("/api/v1/jobs", json=payload)

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_unknown_technician_is_404(client, db):
    slot = make_slot(db)
    payload = job_payload(None, slot, technicianId="missing")

    response = await client.post("/api/v1/jobs", json=payload)

    assert response.status_code == 404
    assert response.json()["detail"] == "Technician with ID missing not found"


@pytest.mark.asyncio
async def test_list_jobs_with_filters_and_pagination(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    for offset in range(3):
        make_job(db, technician, slot, TODAY + timedelta(days=offset + 1))
    make_job(db, technician, slot, TODAY + timedelta(days=9), city="Austin")

    response = await client.get("/api/v1/jobs", params={"limit": 2, "city": "springfield"})

    data = response.json()
    assert response.status_code == 200
    assert data["pagination"]["totalCount"] == 3
    assert data["pagination"]["totalPages"] == 2
    assert data["pagination"]["hasNextPage"] is True
    assert len(data["jobs"]) == 2


@pytest.mark.asyncio
async def test_list_jobs_by_single_date(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    make_job(db, technician, slot, TODAY + timedelta(days=1))
    target = make_job(db, technician, slot, TODAY + timedelta(days=2))

    response = await client.get(
        "/api/v1/jobs", params={"date": (TODAY + timedelta(days=2)).isoformat()}
    )

    assert [job["id"] for job in response.json()["jobs"]] == [target.id]


@pytest.mark.asyncio
async def test_stats(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    make_job(db, technician, slot, TODAY + timedelta(days=1))
    make_job(db, technician, slot, TODAY + timedelta(days=2), status=JobStatus.COMPLETED)

    response = await client.get("/api/v1/jobs/stats")

    data = response.json()
    assert data["totalJobs"] == 2
    assert data["completionRate"] == 50.0
    assert data["pendingJobs"] == 0
    assert data["activeTechnicians"] == 1


@pytest.mark.asyncio
async def test_technician_stats(client, db):
    technician = make_technician(db)
    slot = make_slot(db, "16:00", "18:00")
    make_job(db, technician, slot, TODAY)

    response = await client.get(f"/api/v1/jobs/technicians/{technician.id}/stats")

    data = response.json()
    assert data["technician"]["id"] == technician.id
    assert data["today"] == {"assigned": 1, "completed": 0, "pending": 1, "completionRate": 0.0}


@pytest.mark.asyncio
async def test_available_technicians(client, db):
    slot = make_slot(db)
    busy = make_technician(db, name="Busy Bee")
    free = make_technician(db, name="Free Fox")
    make_job(db, busy, slot)

    response = await client.get(
        "/api/v1/jobs/available-technicians",
        params={"scheduledDate": TODAY.isoformat(), "timeSlotId": slot.id},
    )

    assert [technician["id"] for technician in response.json()] == [free.id]


@pytest.mark.asyncio
async def test_available_technicians_past_date_is_400(client, db):
    slot = make_slot(db)

    response = await client.get(
        "/api/v1/jobs/available-technicians",
        params={"scheduledDate": (TODAY - timedelta(days=1)).isoformat(), "timeSlotId": slot.id},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "PAST_DATE_REQUESTED"


@pytest.mark.asyncio
async def test_available_slots(client, db):
    technician = make_technician(db)
    booked = make_slot(db, "08:00", "10:00", order=1)
    free = make_slot(db, "10:00", "12:00", order=2)
    make_job(db, technician, booked)

    response = await client.get(
        "/api/v1/jobs/available-slots",
        params={"scheduledDate": TODAY.isoformat(), "technicianId": technician.id},
    )

    slots = {slot["timeSlot"]["id"]: slot for slot in response.json()}
    assert slots[booked.id]["available"] is False
    assert slots[booked.id]["reason"] == "Already booked"
    assert slots[free.id]["available"] is True


@pytest.mark.asyncio
async def test_get_update_complete_delete(client, db, clock):
    technician = make_technician(db)
    slot = make_slot(db, "08:00", "10:00")
    job = make_job(db, technician, slot)

    fetched = await client.get(f"/api/v1/jobs/{job.id}")
    assert fetched.json()["status"] == "ASSIGNED"

    patched = await client.patch(f"/api/v1/jobs/{job.id}", json={"jobDescription": "Oven too"})
    assert patched.json()["jobDescription"] == "Oven too"

    early_delete = await client.delete(f"/api/v1/jobs/{job.id}")
    assert early_delete.status_code == 409
    assert early_delete.json()["code"] == "SLOT_STILL_ACTIVE"

    completed = await client.post(f"/api/v1/jobs/{job.id}/complete")
    assert completed.json()["status"] == "COMPLETED"

    still_live = await client.delete(f"/api/v1/jobs/{job.id}")
    assert still_live.status_code == 409

    clock.now = datetime(2030, 6, 12, 10, 1)
    deleted = await client.delete(f"/api/v1/jobs/{job.id}")
    assert deleted.json() == {"message": "Job deleted successfully"}

    missing = await client.get(f"/api/v1/jobs/{job.id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_backwards_status_change_is_400(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    job = make_job(db, technician, slot, status=JobStatus.COMPLETED)

    response = await client.patch(f"/api/v1/jobs/{job.id}", json={"status": "PENDING"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_time_slot_routes(client, db):
    created = await client.post(
        "/api/v1/time-slots", json={"startTime": "08:00", "endTime": "10:00"}
    )
    assert created.status_code == 201
    slot_id = created.json()["id"]
    assert created.json()["label"] == "8:00 AM - 10:00 AM"

    duplicate = await client.post(
        "/api/v1/time-slots", json={"startTime": "08:00", "endTime": "10:00"}
    )
    assert duplicate.status_code == 409

    bad = await client.post("/api/v1/time-slots", json={"startTime": "8am", "endTime": "10:00"})
    assert bad.status_code == 400
    assert bad.json()["code"] == "INVALID_TIME_FORMAT"

    patched = await client.patch(f"/api/v1/time-slots/{slot_id}", json={"isActive": False})
    assert patched.json()["isActive"] is False

    active = await client.get("/api/v1/time-slots", params={"activeOnly": "true"})
    assert active.json() == []

    deleted = await client.delete(f"/api/v1/time-slots/{slot_id}")
    assert deleted.json() == {"message": "Time slot deleted successfully"}


@pytest.mark.asyncio
async def test_time_slot_in_use_is_409(client, db):
    technician = make_technician(db)
    slot = make_slot(db)
    make_job(db, technician, slot)

    response = await client.delete(f"/api/v1/time-slots/{slot.id}")

    assert response.status_code == 409
    assert response.json()["code"] == "SLOT_IN_USE"


@pytest.mark.asyncio
async def test_notification_preference_routes(client):
    initial = await client.get("/api/v1/notification-preferences")
    assert initial.json()["sendCustomerEmail"] is True
    assert initial.json()["sendTechnicianSMS"] is True

    updated = await client.patch(
        "/api/v1/notification-preferences/sms", json={"sendTechnicianSMS": False}
    )
    assert updated.json()["sendTechnicianSMS"] is False

    repeated = await client.patch(
        "/api/v1/notification-preferences/sms", json={"sendTechnicianSMS": False}
    )
    assert repeated.status_code == 409
    assert repeated.json()["detail"] == "SMS notifications are already disabled"
