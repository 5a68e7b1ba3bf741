"""
OTP Reset
=========
Phone OTP issuance, verification and single-use consumption, with a
password reset against an external identity store.
"""

__version__ = "1.0.0"

from .errors import (
    OtpServiceError,
    InvalidInput,
    OtpNotFound,
    OtpExpired,
    OtpMismatch,
    DeliveryFailed,
    IdentityStoreError,
    InfrastructureError,
)
from .config import Settings
from .otp import OtpConfig, OtpRecord, OtpLifecycleManager, PasswordResetService
from .store import OtpStore, InMemoryOtpStore, RedisOtpStore

__all__ = [
    "__version__",
    # Errors
    "OtpServiceError",
    "InvalidInput",
    "OtpNotFound",
    "OtpExpired",
    "OtpMismatch",
    "DeliveryFailed",
    "IdentityStoreError",
    "InfrastructureError",
    # Config
    "Settings",
    # Lifecycle
    "OtpConfig",
    "OtpRecord",
    "OtpLifecycleManager",
    "PasswordResetService",
    # Storage
    "OtpStore",
    "InMemoryOtpStore",
    "RedisOtpStore",
]
