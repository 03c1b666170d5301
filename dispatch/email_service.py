"""
Email Service using Resend
Compiles MJML templates to HTML and delivers them off the event loop
"""

import asyncio
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, EMAIL_TIMEOUT_SECONDS, RESEND_API_KEY
from .email_templates import job_confirmation_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e

    # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    timeout: float = EMAIL_TIMEOUT_SECONDS,
) -> dict:
    """
    Send an email through Resend.

    The Resend client is synchronous, so the call runs in a worker thread and
    is abandoned after ``timeout`` seconds.

    Raises:
        EmailDeliveryError: when the service is unconfigured, times out or rejects the message
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailDeliveryError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    email_data = {
        "from": from_address or EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": html_content,
    }

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = await asyncio.wait_for(
            asyncio.to_thread(resend.Emails.send, email_data), timeout=timeout
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except asyncio.TimeoutError as e:
        logger.error(f"⏱️ Email send to {recipients} timed out after {timeout}s")
        raise EmailDeliveryError(f"Email send timed out after {timeout}s") from e
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


async def send_job_confirmation_email(
    to: str,
    customer_name: str,
    service_address: str,
    customer_phone: str,
    scheduled_date: str,
    time_label: Optional[str],
    job_description: Optional[str],
    technician_name: str,
    technician_phone: str,
) -> dict:
    """Send the job confirmation notice to a customer"""
    mjml_content = job_confirmation_template(
        customer_name=customer_name,
        service_address=service_address,
        customer_phone=customer_phone,
        scheduled_date=scheduled_date,
        time_label=time_label,
        job_description=job_description,
        technician_name=technician_name,
        technician_phone=technician_phone,
    )
    return await send_email(
        to=to,
        subject="Job Confirmation Notice – Dispatch Bros",
        mjml_content=mjml_content,
    )
