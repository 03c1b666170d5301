"""Notification preference schemas"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class NotificationSettings:
    """Immutable snapshot of the preferences, handed to the scheduler per request"""

    send_customer_email: bool = True
    send_technician_sms: bool = True


class EmailPreferenceUpdate(BaseModel):
    sendCustomerEmail: bool


class SmsPreferenceUpdate(BaseModel):
    sendTechnicianSMS: bool


class NotificationPreferencesResponse(BaseModel):
    id: str
    sendCustomerEmail: bool
    sendTechnicianSMS: bool
    updatedAt: Optional[datetime] = None
