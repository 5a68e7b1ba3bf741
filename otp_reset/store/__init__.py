"""
OTP Store
=========
Persistence backends for OTP records.
"""

from .base import OtpStore
from .memory import InMemoryOtpStore
from .redis_store import RedisOtpStore

__all__ = [
    "OtpStore",
    "InMemoryOtpStore",
    "RedisOtpStore",
]
