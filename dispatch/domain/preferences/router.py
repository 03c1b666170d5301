"""Notification preferences router"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import NotificationPreferences
from .schemas import EmailPreferenceUpdate, NotificationPreferencesResponse, SmsPreferenceUpdate
from .service import PreferencesService

router = APIRouter(prefix="/api/v1/notification-preferences", tags=["Notification Preferences"])


def get_preferences_service(db: Session = Depends(get_db)) -> PreferencesService:
    """Dependency injection for PreferencesService"""
    return PreferencesService(db)


def to_response(preferences: NotificationPreferences) -> NotificationPreferencesResponse:
    return NotificationPreferencesResponse(
        id=preferences.id,
        sendCustomerEmail=preferences.send_customer_email,
        sendTechnicianSMS=preferences.send_technician_sms,
        updatedAt=preferences.updated_at,
    )


@router.get("", response_model=NotificationPreferencesResponse)
async def get_preferences(service: PreferencesService = Depends(get_preferences_service)):
    """Get the notification preferences, creating the defaults on first access"""
    return to_response(service.get_preferences())


@router.patch("/email", response_model=NotificationPreferencesResponse)
async def update_email_preference(
    data: EmailPreferenceUpdate,
    service: PreferencesService = Depends(get_preferences_service),
):
    """Enable or disable the customer confirmation email"""
    result = service.update_email_preference(data.sendCustomerEmail)
    if not result.ok:
        return JSONResponse(status_code=result.error.http_status, content=result.error.to_payload())
    return to_response(result.value)


@router.patch("/sms", response_model=NotificationPreferencesResponse)
async def update_sms_preference(
    data: SmsPreferenceUpdate,
    service: PreferencesService = Depends(get_preferences_service),
):
    """Enable or disable the technician assignment SMS"""
    result = service.update_sms_preference(data.sendTechnicianSMS)
    if not result.ok:
        return JSONResponse(status_code=result.error.http_status, content=result.error.to_payload())
    return to_response(result.value)
