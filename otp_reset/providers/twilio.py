"""
Twilio SMS Provider Adapter
===========================
Adapter for the Twilio Messages API.
"""

from base64 import b64encode
from typing import Any, Dict, Optional

import httpx
import structlog

from .base import BaseProviderAdapter, MessageStatus, SendResult, json_object

logger = structlog.get_logger(__name__)


class TwilioAdapter(BaseProviderAdapter):
    """Twilio SMS provider adapter."""

    name = "twilio"

    def __init__(
        self,
        config: Dict[str, Any],
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: {
                "account_sid": "ACxxx",
                "auth_token": "xxx",
                "from_number": "+1xxx",
                "timeout": 30.0,  # optional
            }
            transport: Optional httpx transport (tests)
        """
        super().__init__(config)
        self.account_sid = config["account_sid"]
        self.auth_token = config["auth_token"]
        self.from_number = config.get("from_number", "")
        self.timeout = float(config.get("timeout", 30.0))
        self.base_url = f"https://api.twilio.com/2010-04-01/Accounts/{self.account_sid}"
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create HTTP client with auth."""
        auth = b64encode(f"{self.account_sid}:{self.auth_token}".encode()).decode()
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Basic {auth}"},
            timeout=self.timeout,
            transport=self._transport,
        )
        await super().initialize()

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
        await super().close()

    async def send_sms(
        self,
        to: str,
        body: str,
        code: Optional[str] = None,
    ) -> SendResult:
        """Send SMS via Twilio."""
        if not self._client:
            raise RuntimeError("Adapter not initialized")

        payload = {
            "To": to,
            "From": self.from_number,
            "Body": body,
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/Messages.json",
                data=payload,
            )
        except httpx.HTTPError as e:
            logger.error("Twilio send failed", error=str(e))
            return SendResult(
                success=False,
                status=MessageStatus.FAILED,
                error_message=str(e),
            )

        data = json_object(response)

        if response.status_code == 201:
            return SendResult(
                success=True,
                provider_message_id=data.get("sid"),
                status=self._map_status(data.get("status", "")),
                raw_response=data,
            )

        return SendResult(
            success=False,
            status=MessageStatus.FAILED,
            error_code=str(data.get("code", response.status_code)),
            error_message=data.get("message", "Unknown error"),
            raw_response=data,
        )

    def _map_status(self, twilio_status: str) -> MessageStatus:
        """Map Twilio status to internal status."""
        mapping = {
            "queued": MessageStatus.PENDING,
            "accepted": MessageStatus.PENDING,
            "sending": MessageStatus.PENDING,
            "sent": MessageStatus.SENT,
            "delivered": MessageStatus.DELIVERED,
            "undelivered": MessageStatus.FAILED,
            "failed": MessageStatus.FAILED,
        }
        return mapping.get(twilio_status.lower(), MessageStatus.PENDING)

    async def health_check(self) -> bool:
        """Check Twilio API availability."""
        if not self._client:
            return False

        try:
            response = await self._client.get(f"{self.base_url}.json")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
