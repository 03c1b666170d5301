"""Time slot router - FastAPI endpoints for slot configuration"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import TimeSlot
from .schemas import MessageResponse, TimeSlotCreate, TimeSlotResponse, TimeSlotUpdate
from .service import TimeSlotService

router = APIRouter(prefix="/api/v1/time-slots", tags=["Time Slots"])


def get_time_slot_service(db: Session = Depends(get_db)) -> TimeSlotService:
    """Dependency injection for TimeSlotService"""
    return TimeSlotService(db)


def to_response(time_slot: TimeSlot) -> TimeSlotResponse:
    return TimeSlotResponse(
        id=time_slot.id,
        label=time_slot.label,
        startTime=time_slot.start_time,
        endTime=time_slot.end_time,
        order=time_slot.order,
        isActive=time_slot.is_active,
    )


def error_response(error) -> JSONResponse:
    return JSONResponse(status_code=error.http_status, content=error.to_payload())


@router.get("", response_model=list[TimeSlotResponse])
async def list_time_slots(
    active_only: bool = Query(False, alias="activeOnly"),
    service: TimeSlotService = Depends(get_time_slot_service),
):
    """All time slots in display order"""
    return [to_response(slot) for slot in service.list_time_slots(active_only)]


@router.post("", response_model=TimeSlotResponse, status_code=201)
async def create_time_slot(
    data: TimeSlotCreate,
    service: TimeSlotService = Depends(get_time_slot_service),
):
    result = service.create_time_slot(data)
    if not result.ok:
        return error_response(result.error)
    return to_response(result.value)


@router.patch("/{time_slot_id}", response_model=TimeSlotResponse)
async def update_time_slot(
    time_slot_id: str,
    data: TimeSlotUpdate,
    service: TimeSlotService = Depends(get_time_slot_service),
):
    result = service.update_time_slot(time_slot_id, data)
    if not result.ok:
        return error_response(result.error)
    return to_response(result.value)


@router.delete("/{time_slot_id}", response_model=MessageResponse)
async def delete_time_slot(
    time_slot_id: str,
    service: TimeSlotService = Depends(get_time_slot_service),
):
    result = service.delete_time_slot(time_slot_id)
    if not result.ok:
        return error_response(result.error)
    return result.value
