"""Notification preferences service - read, snapshot and toggle the delivery channels"""

import logging

from sqlalchemy.orm import Session

from ...models import NotificationPreferences
from ..scheduling.errors import ErrorKind, Result, SchedulingError
from .repository import PreferencesRepository
from .schemas import NotificationSettings

logger = logging.getLogger(__name__)


class PreferencesService:
    """Service layer for the notification preferences singleton"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PreferencesRepository()

    def get_preferences(self) -> NotificationPreferences:
        return self.repo.get_or_create(self.db)

    def snapshot(self) -> NotificationSettings:
        """Current toggles as an immutable value, loaded once per scheduling request"""
        preferences = self.get_preferences()
        return NotificationSettings(
            send_customer_email=preferences.send_customer_email,
            send_technician_sms=preferences.send_technician_sms,
        )

    def update_email_preference(self, send_customer_email: bool) -> Result[NotificationPreferences]:
        current = self.get_preferences()
        if current.send_customer_email == send_customer_email:
            state = "enabled" if send_customer_email else "disabled"
            return Result.failure(
                SchedulingError(ErrorKind.CONFLICT, f"Email notifications are already {state}")
            )

        preferences = self.repo.upsert_preferences(
            self.db, send_customer_email=send_customer_email
        )
        logger.info(f"📧 Email preference updated to: {send_customer_email}")
        return Result.success(preferences)

    def update_sms_preference(self, send_technician_sms: bool) -> Result[NotificationPreferences]:
        current = self.get_preferences()
        if current.send_technician_sms == send_technician_sms:
            state = "enabled" if send_technician_sms else "disabled"
            return Result.failure(
                SchedulingError(ErrorKind.CONFLICT, f"SMS notifications are already {state}")
            )

        preferences = self.repo.upsert_preferences(
            self.db, send_technician_sms=send_technician_sms
        )
        logger.info(f"📱 SMS preference updated to: {send_technician_sms}")
        return Result.success(preferences)
