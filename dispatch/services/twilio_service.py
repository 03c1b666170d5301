"""
Twilio SMS Service
Sends technician assignment texts through the Twilio REST API
"""

import logging
from typing import Optional

import httpx

from ..config import (
    SMS_TIMEOUT_SECONDS,
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_PHONE_NUMBER,
)

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


async def send_sms(
    to_phone: str,
    message_body: str,
    account_sid: Optional[str] = TWILIO_ACCOUNT_SID,
    auth_token: Optional[str] = TWILIO_AUTH_TOKEN,
    from_phone: Optional[str] = TWILIO_PHONE_NUMBER,
    timeout: float = SMS_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[bool, Optional[str]]:
    """
    Send SMS via Twilio

    Args:
        to_phone: Recipient phone number (must be in E.164 format)
        message_body: SMS message content

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not to_phone:
        return False, "No phone number provided"

    if not to_phone.startswith("+"):
        logger.warning(f"Phone number not in E.164 format: {to_phone}")
        return False, "Phone number must be in E.164 format (e.g., +1234567890)"

    if not account_sid or not auth_token or not from_phone:
        logger.warning("⚠️ Twilio is not configured - SMS not sent")
        return False, "Twilio is not configured"

    data = {"To": to_phone, "From": from_phone, "Body": message_body}

    try:
        logger.info(f"🚀 Sending SMS to Twilio API for {to_phone}")
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{account_sid}/Messages.json",
                auth=(account_sid, auth_token),
                data=data,
                timeout=timeout,
            )

        logger.info(f"📡 Twilio API response status: {response.status_code}")

        if response.status_code in [200, 201]:
            message_sid = response.json().get("sid")
            logger.info(f"✅ SMS sent successfully to {to_phone} (SID: {message_sid})")
            return True, None

        error_data = response.json()
        error_message = error_data.get("message", "Unknown error")
        error_code = error_data.get("code")
        logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
        return False, error_message

    except httpx.TimeoutException:
        logger.warning(f"⏱️ Twilio request timed out after {timeout}s for {to_phone}")
        return False, f"SMS request timed out after {timeout}s"
    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        return False, str(e)
    except ValueError as e:
        # Non-JSON body from Twilio
        logger.error(f"Unreadable Twilio response: {str(e)}")
        return False, "Unreadable response from Twilio"


def build_technician_assignment_sms(
    technician_name: str,
    customer_name: str,
    customer_phone: str,
    service_address: str,
    scheduled_date: str,
    time_label: str,
    job_description: Optional[str] = None,
) -> str:
    """Text sent to a technician when a job is assigned to them"""
    message = (
        f"Hi {technician_name}! New job assigned: {customer_name} on {scheduled_date} "
        f"({time_label}) at {service_address}. Customer phone: {customer_phone}."
    )
    if job_description:
        message += f" Details: {job_description}"
    return message
