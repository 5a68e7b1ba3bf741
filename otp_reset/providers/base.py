"""
SMS Provider Adapter Base
=========================
Base classes for SMS gateway integrations used to deliver OTPs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


def json_object(response) -> Dict[str, Any]:
    """Gateway response body as a dict. Unparseable or non-object bodies are empty."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class SendResult:
    """Result of a message send operation."""
    success: bool
    provider_message_id: Optional[str] = None
    status: MessageStatus = MessageStatus.PENDING
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class BaseProviderAdapter(ABC):
    """
    Abstract base class for SMS provider adapters.

    All provider implementations (Fast2SMS, Twilio) inherit from this.
    """

    name: str = "base"

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Provider-specific config (API keys, account IDs, etc.)
        """
        self.config = config
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the adapter (e.g., create HTTP clients)."""
        self._is_initialized = True
        logger.info("Provider adapter initialized", provider=self.name)

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        self._is_initialized = False
        logger.info("Provider adapter closed", provider=self.name)

    def format_destination(self, phone_key: str, country_code: str) -> str:
        """Destination number in the form this provider expects. E.164 by default."""
        return f"+{country_code.lstrip('+')}{phone_key}"

    @abstractmethod
    async def send_sms(
        self,
        to: str,
        body: str,
        code: Optional[str] = None,
    ) -> SendResult:
        """
        Send an SMS message.

        Args:
            to: Recipient in the form returned by format_destination
            body: Full message text
            code: Bare OTP, for providers with a dedicated OTP route

        Returns:
            SendResult with provider response
        """

    async def health_check(self) -> bool:
        """
        Check if the provider is usable.

        Returns:
            True if the adapter is initialized
        """
        return self._is_initialized
