"""
OTP Lifecycle
=============
Generation, hashed storage, verification and single-use consumption of
phone OTPs, plus the password reset that a consumed OTP authorizes.
"""

from .models import OtpConfig, OtpRecord
from .hashing import generate_otp, hash_otp, verify_otp_hash
from .phone import normalize_phone_key, to_e164
from .delivery import OtpDelivery, SmsOtpDelivery
from .manager import OtpLifecycleManager
from .reset import PasswordResetService

__all__ = [
    # Models
    "OtpConfig",
    "OtpRecord",
    # Hashing
    "generate_otp",
    "hash_otp",
    "verify_otp_hash",
    # Phone
    "normalize_phone_key",
    "to_e164",
    # Delivery
    "OtpDelivery",
    "SmsOtpDelivery",
    # Lifecycle
    "OtpLifecycleManager",
    "PasswordResetService",
]
