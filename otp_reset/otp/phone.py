"""
Phone Utilities
===============
Normalization of submitted phone numbers into storage keys.
"""

import re
from typing import Optional

from otp_reset.errors import InvalidInput

PHONE_KEY_DIGITS = 10


def normalize_phone_key(phone: Optional[str], message: str = "phone is required") -> str:
    """
    Normalize a raw phone number to its PhoneKey.

    Keeps digits only, then the last 10. "+91 98765-43210", "09876543210"
    and "9876543210" all map to "9876543210". Idempotent.

    Args:
        phone: Raw phone number as submitted
        message: Client message used when the input has no digits

    Returns:
        Digits-only key, at most 10 characters

    Raises:
        InvalidInput: If the input is missing or contains no digits
    """
    if phone is None:
        raise InvalidInput(message)

    digits = re.sub(r"\D", "", str(phone))
    if not digits:
        raise InvalidInput(message)

    return digits[-PHONE_KEY_DIGITS:]


def to_e164(phone_key: str, country_code: str) -> str:
    """Build an E.164 destination from a phone key and a country code."""
    return f"+{country_code.lstrip('+')}{phone_key}"
