"""
Job Notification Service
Sends the customer confirmation email and the technician SMS after a job is booked.
Delivery is best-effort: every failure is reported as a status, never raised.
"""

import asyncio
import logging
from dataclasses import dataclass

from ..domain.preferences.schemas import NotificationSettings
from ..email_service import send_job_confirmation_email
from ..models import Job, Technician
from ..shared.validators import to_e164
from .twilio_service import build_technician_assignment_sms, send_sms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryStatus:
    sent: bool
    message: str

    def to_dict(self) -> dict:
        return {"sent": self.sent, "message": self.message}


@dataclass(frozen=True)
class SmsResult:
    success: bool
    message: str


@dataclass(frozen=True)
class NotificationReport:
    email_status: DeliveryStatus
    sms_status: DeliveryStatus

    def to_dict(self) -> dict:
        return {
            "emailStatus": self.email_status.to_dict(),
            "smsStatus": self.sms_status.to_dict(),
        }


class Notifier:
    """Email and SMS delivery; senders are injectable for tests"""

    def __init__(self, email_sender=send_job_confirmation_email, sms_sender=send_sms):
        self.email_sender = email_sender
        self.sms_sender = sms_sender

    async def send_job_confirmation(
        self, job: Job, technician: Technician, settings: NotificationSettings
    ) -> DeliveryStatus:
        if not job.customer_email:
            logger.debug(f"⚠️ No customer email for job {job.id}")
            return DeliveryStatus(False, "Customer email not provided")
        if not settings.send_customer_email:
            logger.debug("ℹ️ Customer email notifications disabled")
            return DeliveryStatus(False, "Customer email notifications are disabled")

        try:
            await self.email_sender(
                to=job.customer_email,
                customer_name=job.customer_name,
                service_address=job.service_address,
                customer_phone=job.customer_phone,
                scheduled_date=job.scheduled_date.strftime("%m/%d/%Y"),
                time_label=job.time_slot.label if job.time_slot else None,
                job_description=job.job_description,
                technician_name=technician.name,
                technician_phone=technician.phone,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send job confirmation email for job {job.id}: {e}")
            return DeliveryStatus(False, "Email sending failed")

        logger.info(f"✅ Job confirmation email sent to {job.customer_email}")
        return DeliveryStatus(True, "Email sent successfully")

    async def send_sms(self, phone: str, body: str) -> SmsResult:
        try:
            formatted_phone = to_e164(phone)
        except ValueError:
            logger.warning(f"⚠️ Invalid phone number format: {phone}")
            return SmsResult(False, "Invalid phone number format")

        try:
            success, error = await self.sms_sender(to_phone=formatted_phone, message_body=body)
        except Exception as e:
            logger.error(f"❌ Failed to send SMS to {formatted_phone}: {e}")
            return SmsResult(False, str(e))

        if success:
            return SmsResult(True, "SMS sent successfully")
        logger.warning(f"⚠️ SMS not sent to {formatted_phone}: {error}")
        return SmsResult(False, error or "SMS sending failed")


async def notify_job_scheduled(
    notifier: Notifier,
    job: Job,
    technician: Technician,
    settings: NotificationSettings,
) -> NotificationReport:
    """
    Fire both notifications for a committed job and collect their outcomes.

    Runs after the booking transaction has committed; nothing here can undo it.
    """
    email_task = notifier.send_job_confirmation(job, technician, settings)
    sms_task = _text_technician(notifier, job, technician, settings)
    email_status, sms_status = await asyncio.gather(email_task, sms_task)
    return NotificationReport(email_status=email_status, sms_status=sms_status)


async def _text_technician(
    notifier: Notifier, job: Job, technician: Technician, settings: NotificationSettings
) -> DeliveryStatus:
    if not technician.phone:
        logger.debug(f"⚠️ No phone number for technician {technician.id}")
        return DeliveryStatus(False, "Technician phone not provided")
    if not settings.send_technician_sms:
        logger.debug("ℹ️ Technician SMS notifications disabled")
        return DeliveryStatus(False, "Technician SMS notifications are disabled")

    body = build_technician_assignment_sms(
        technician_name=technician.name,
        customer_name=job.customer_name,
        customer_phone=job.customer_phone,
        service_address=job.service_address,
        scheduled_date=job.scheduled_date.strftime("%m/%d/%Y"),
        time_label=job.time_slot.label if job.time_slot else "",
        job_description=job.job_description,
    )

    try:
        result = await notifier.send_sms(technician.phone, body)
    except Exception as e:
        logger.error(f"❌ Technician SMS failed for job {job.id}: {e}")
        return DeliveryStatus(False, str(e))

    if result.success:
        logger.info(f"📱 Technician {technician.id} notified about job {job.id}")
    return DeliveryStatus(result.success, result.message)
