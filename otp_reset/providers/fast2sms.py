"""
Fast2SMS Provider Adapter
=========================
Adapter for the Fast2SMS bulk API OTP route (Indian numbers).
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from .base import BaseProviderAdapter, MessageStatus, SendResult, json_object

logger = structlog.get_logger(__name__)

FAST2SMS_URL = "https://www.fast2sms.com/dev/bulkV2"


class Fast2SMSAdapter(BaseProviderAdapter):
    """
    Fast2SMS provider adapter.

    Uses the dedicated "otp" route: the gateway renders its own template
    around the bare code, so only the code is sent.
    """

    name = "fast2sms"

    def __init__(
        self,
        config: Dict[str, Any],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: {
                "api_key": "xxx",
                "timeout": 30.0,  # optional
            }
            transport: Optional httpx transport (tests)
        """
        super().__init__(config)
        self.api_key = config["api_key"]
        self.timeout = float(config.get("timeout", 30.0))
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        self._client = httpx.AsyncClient(
            headers={"authorization": self.api_key},
            timeout=self.timeout,
            transport=self._transport,
        )
        await super().initialize()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    def format_destination(self, phone_key: str, country_code: str) -> str:
        # Fast2SMS takes bare 10 digit national numbers
        return phone_key

    async def send_sms(
        self,
        to: str,
        body: str,
        code: Optional[str] = None,
    ) -> SendResult:
        """Send an OTP via the Fast2SMS OTP route."""
        if not self._client:
            raise RuntimeError("Adapter not initialized")
        if code is None:
            raise ValueError("Fast2SMS OTP route requires the bare code")

        params = {
            "route": "otp",
            "variables_values": code,
            "numbers": to,
        }

        try:
            response = await self._client.get(FAST2SMS_URL, params=params)
        except httpx.HTTPError as e:
            logger.error("Fast2SMS send failed", error=str(e))
            return SendResult(
                success=False,
                status=MessageStatus.FAILED,
                error_message=str(e),
            )

        data = json_object(response)

        if response.status_code == 200 and data.get("return") is True:
            return SendResult(
                success=True,
                provider_message_id=data.get("request_id"),
                status=MessageStatus.SENT,
                raw_response=data,
            )

        message = data.get("message", "Unknown error")
        if isinstance(message, list):
            message = "; ".join(str(m) for m in message)

        return SendResult(
            success=False,
            status=MessageStatus.FAILED,
            error_code=str(data.get("status_code", response.status_code)),
            error_message=str(message),
            raw_response=data,
        )
