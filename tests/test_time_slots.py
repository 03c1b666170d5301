"""Time slot configuration."""

import pytest
from conftest import make_job, make_slot, make_technician
from pydantic import ValidationError

from dispatch.domain.scheduling.errors import ErrorKind
from dispatch.domain.time_slots.schemas import TimeSlotCreate, TimeSlotUpdate
from dispatch.domain.time_slots.service import DEFAULT_TIME_SLOTS, TimeSlotService


def test_seed_default_time_slots_only_into_an_empty_table(db):
    service = TimeSlotService(db)

    assert service.seed_default_time_slots() == len(DEFAULT_TIME_SLOTS)
    assert service.seed_default_time_slots() == 0

    slots = service.list_time_slots()
    assert [slot.label for slot in slots] == [
        "8:00 AM - 10:00 AM",
        "10:00 AM - 12:00 PM",
        "11:00 AM - 1:00 PM",
        "1:00 PM - 3:00 PM",
        "2:00 PM - 4:00 PM",
        "4:00 PM - 6:00 PM",
    ]
    assert [slot.order for slot in slots] == [1, 2, 3, 4, 5, 6]


def test_create_derives_label_and_appends_order(db):
    make_slot(db, "08:00", "10:00", order=4)
    service = TimeSlotService(db)

    result = service.create_time_slot(TimeSlotCreate(startTime="18:00", endTime="20:30"))

    assert result.ok
    assert result.value.label == "6:00 PM - 8:30 PM"
    assert result.value.order == 5
    assert (result.value.start_time, result.value.end_time) == ("18:00", "20:30")


def test_create_keeps_an_explicit_order(db):
    make_slot(db, "08:00", "10:00", order=4)
    service = TimeSlotService(db)

    result = service.create_time_slot(TimeSlotCreate(startTime="06:00", endTime="08:00", order=1))

    assert result.value.order == 1
    with pytest.raises(ValidationError):
        TimeSlotCreate(startTime="06:00", endTime="08:00", order=0)


def test_create_rejects_bad_times(db):
    service = TimeSlotService(db)

    bad_format = service.create_time_slot(TimeSlotCreate(startTime="25:00", endTime="26:00"))
    backwards = service.create_time_slot(TimeSlotCreate(startTime="10:00", endTime="08:00"))

    assert bad_format.error.kind == ErrorKind.INVALID_TIME_FORMAT
    assert backwards.error.kind == ErrorKind.VALIDATION_ERROR
    assert backwards.error.message == "End time must be after start time"


def test_create_rejects_duplicate_window(db):
    existing = make_slot(db, "08:00", "10:00")
    service = TimeSlotService(db)

    result = service.create_time_slot(TimeSlotCreate(startTime="08:00", endTime="10:00"))

    assert result.error.kind == ErrorKind.CONFLICT
    assert result.error.details["existingTimeSlotId"] == existing.id


def test_list_active_only(db):
    make_slot(db, "08:00", "10:00", order=1)
    make_slot(db, "10:00", "12:00", order=2, is_active=False)

    slots = TimeSlotService(db).list_time_slots(active_only=True)

    assert [slot.start_time for slot in slots] == ["08:00"]


def test_update_relabels_and_toggles(db):
    slot = make_slot(db, "08:00", "10:00")

    result = TimeSlotService(db).update_time_slot(
        slot.id, TimeSlotUpdate(endTime="11:00", isActive=False)
    )

    assert result.value.label == "8:00 AM - 11:00 AM"
    assert result.value.is_active is False
    assert result.value.order == 1


def test_slot_referenced_by_a_job_is_frozen(db):
    technician = make_technician(db)
    slot = make_slot(db)
    make_job(db, technician, slot)
    service = TimeSlotService(db)

    update = service.update_time_slot(slot.id, TimeSlotUpdate(isActive=False))
    delete = service.delete_time_slot(slot.id)

    assert update.error.kind == ErrorKind.SLOT_IN_USE
    assert delete.error.kind == ErrorKind.SLOT_IN_USE
    assert delete.error.details["jobCount"] == 1


def test_delete_unused_slot(db):
    slot = make_slot(db)
    service = TimeSlotService(db)

    assert service.delete_time_slot(slot.id).value == {"message": "Time slot deleted successfully"}
    assert service.get_time_slot(slot.id).error.kind == ErrorKind.NOT_FOUND


def test_missing_slot(db):
    service = TimeSlotService(db)

    updated = service.update_time_slot("missing", TimeSlotUpdate(order=2))

    assert updated.error.kind == ErrorKind.NOT_FOUND
    assert service.delete_time_slot("missing").error.kind == ErrorKind.NOT_FOUND
