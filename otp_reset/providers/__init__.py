"""
SMS Provider Adapters
=====================
Adapters for the SMS gateways that deliver OTPs.
"""

from .base import BaseProviderAdapter, MessageStatus, SendResult
from .fast2sms import Fast2SMSAdapter
from .twilio import TwilioAdapter

__all__ = [
    "BaseProviderAdapter",
    "MessageStatus",
    "SendResult",
    "Fast2SMSAdapter",
    "TwilioAdapter",
]
