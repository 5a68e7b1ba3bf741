"""
OTP Delivery
============
Hands a plaintext code to an SMS provider adapter.
"""

from abc import ABC, abstractmethod

import structlog

from otp_reset.errors import DeliveryFailed
from otp_reset.logging import mask_phone
from otp_reset.providers.base import BaseProviderAdapter

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATE = "Your OTP is {code}. It will expire in {minutes} minutes."


class OtpDelivery(ABC):
    """Out-of-band channel for a freshly issued code."""

    @abstractmethod
    async def deliver(self, phone_key: str, code: str) -> None:
        """Send code to the phone. Raises DeliveryFailed on failure."""


class SmsOtpDelivery(OtpDelivery):
    """Delivers OTPs as SMS through a provider adapter."""

    def __init__(
        self,
        adapter: BaseProviderAdapter,
        country_code: str = "91",
        ttl_seconds: int = 300,
        template: str = DEFAULT_TEMPLATE,
    ):
        self.adapter = adapter
        self.country_code = country_code
        self.ttl_seconds = ttl_seconds
        self.template = template

    def render(self, code: str) -> str:
        return self.template.format(code=code, minutes=max(self.ttl_seconds // 60, 1))

    async def deliver(self, phone_key: str, code: str) -> None:
        destination = self.adapter.format_destination(phone_key, self.country_code)
        result = await self.adapter.send_sms(destination, self.render(code), code=code)

        if not result.success:
            logger.warning(
                "OTP delivery rejected",
                provider=self.adapter.name,
                phone=mask_phone(phone_key),
                error_code=result.error_code,
                error=result.error_message,
            )
            raise DeliveryFailed(details=result.error_message)

        logger.info(
            "OTP delivered",
            provider=self.adapter.name,
            phone=mask_phone(phone_key),
            message_id=result.provider_message_id,
        )
