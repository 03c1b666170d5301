"""Notification preferences repository - single-row table access"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import PREFERENCES_ID, NotificationPreferences
from ...shared.time_window import local_now


class PreferencesRepository:
    """Repository for the notification preferences row"""

    @staticmethod
    def get_preferences(db: Session) -> Optional[NotificationPreferences]:
        return db.get(NotificationPreferences, PREFERENCES_ID)

    @staticmethod
    def get_or_create(db: Session) -> NotificationPreferences:
        """Fetch the row, creating it with both channels enabled on first access"""
        preferences = db.get(NotificationPreferences, PREFERENCES_ID)
        if preferences:
            return preferences

        preferences = NotificationPreferences(
            id=PREFERENCES_ID, send_customer_email=True, send_technician_sms=True
        )
        db.add(preferences)
        try:
            db.commit()
        except IntegrityError:
            # Another request created it first
            db.rollback()
            return db.get(NotificationPreferences, PREFERENCES_ID)
        db.refresh(preferences)
        return preferences

    @staticmethod
    def upsert_preferences(db: Session, **patch) -> NotificationPreferences:
        """Apply ``patch`` to the row in a single UPDATE, creating the row if needed"""
        PreferencesRepository.get_or_create(db)
        patch["updated_at"] = local_now()
        db.query(NotificationPreferences).filter(
            NotificationPreferences.id == PREFERENCES_ID
        ).update(patch, synchronize_session=False)
        db.commit()
        preferences = db.get(NotificationPreferences, PREFERENCES_ID)
        db.refresh(preferences)
        return preferences
