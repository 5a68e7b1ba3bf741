"""
OTP Service Errors
==================
Domain error taxonomy. Every error carries the message shown to the client
and the HTTP status the API layer answers with.

CRITICAL: 500-class messages are generic. Technical detail goes to the logs only.
"""

from typing import Any, Optional


class OtpServiceError(Exception):
    """Base exception for all OTP lifecycle and password reset errors."""

    status_code: int = 500
    code: str = "OTP_SERVICE_ERROR"
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidInput(OtpServiceError):
    """A required request field is missing or empty."""
    status_code = 400
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class OtpNotFound(OtpServiceError):
    """No live record for the phone: never requested, or already consumed."""
    status_code = 400
    code = "OTP_NOT_FOUND"
    default_message = "OTP not found or already used"


class OtpExpired(OtpServiceError):
    """Record exists but is past its expiry. The record is deleted."""
    status_code = 400
    code = "OTP_EXPIRED"
    default_message = "OTP expired"


class OtpMismatch(OtpServiceError):
    """Submitted code does not match the stored hash. The record is kept."""
    status_code = 400
    code = "OTP_MISMATCH"
    default_message = "Invalid OTP"


class DeliveryFailed(OtpServiceError):
    """SMS gateway refused or failed to deliver the code."""
    status_code = 500
    code = "DELIVERY_FAILED"
    default_message = "Failed to send OTP"


class IdentityStoreError(OtpServiceError):
    """Lookup, creation or credential update in the identity store failed."""
    status_code = 500
    code = "IDENTITY_STORE_ERROR"
    default_message = "Password reset failed"


class InfrastructureError(OtpServiceError):
    """OTP store unavailable or timed out."""
    status_code = 500
    code = "INFRASTRUCTURE_ERROR"
    default_message = "Storage unavailable"


__all__ = [
    "OtpServiceError",
    "InvalidInput",
    "OtpNotFound",
    "OtpExpired",
    "OtpMismatch",
    "DeliveryFailed",
    "IdentityStoreError",
    "InfrastructureError",
]
