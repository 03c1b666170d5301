"""Shared validation utilities"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a US phone number to E.164 (+1XXXXXXXXXX).

    Raises:
        ValueError: If the number does not have 10 digits after dropping a leading 1
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def to_e164(phone: Optional[str]) -> Optional[str]:
    """
    Best-effort E.164 form for outbound SMS.

    Numbers already carrying a ``+`` country prefix are kept as-is (digits
    only); anything else is treated as a US number.
    """
    if not phone:
        return None
    stripped = phone.strip()
    if stripped.startswith("+") and not stripped.startswith("+1"):
        digits = re.sub(r"\D", "", stripped)
        if not 8 <= len(digits) <= 15:
            raise ValueError(f"Invalid international phone number: {phone}")
        return f"+{digits}"
    return validate_us_phone(stripped)


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email
