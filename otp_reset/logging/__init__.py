"""
OTP Service Logging Module

Structured logging for the OTP service.
"""

from .structured import (
    setup_logging,
    mask_phone,
    RequestLoggingMiddleware,
    request_id_var,
    service_name_var,
)

__all__ = [
    "setup_logging",
    "mask_phone",
    "RequestLoggingMiddleware",
    "request_id_var",
    "service_name_var",
]
