"""
Shared fixtures: a controllable clock, a delivery channel that captures
codes instead of sending them, and an SMS provider double.
"""

import asyncio
from typing import List, Optional, Tuple

import pytest

from otp_reset.errors import DeliveryFailed
from otp_reset.otp.delivery import OtpDelivery
from otp_reset.providers.base import BaseProviderAdapter, MessageStatus, SendResult

START = 1_700_000_000.0


class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, now: float = START):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CapturingDelivery(OtpDelivery):
    def __init__(self):
        self.sent: List[Tuple[str, str]] = []
        self.fail = False
        self.delay = 0.0

    async def deliver(self, phone_key: str, code: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise DeliveryFailed(details="gateway down")
        self.sent.append((phone_key, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class FakeProvider(BaseProviderAdapter):
    name = "fake"

    def __init__(self, success: bool = True):
        super().__init__({})
        self.success = success
        self.healthy = True
        self.sent: List[dict] = []

    async def send_sms(self, to: str, body: str, code: Optional[str] = None) -> SendResult:
        self.sent.append({"to": to, "body": body, "code": code})
        if self.success:
            return SendResult(success=True, provider_message_id="msg-1", status=MessageStatus.SENT)
        return SendResult(
            success=False,
            status=MessageStatus.FAILED,
            error_code="412",
            error_message="rejected",
        )

    async def health_check(self) -> bool:
        return self.healthy

    @property
    def last_code(self) -> str:
        return self.sent[-1]["code"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def delivery():
    return CapturingDelivery()


@pytest.fixture
def store():
    from otp_reset.store import InMemoryOtpStore

    return InMemoryOtpStore()


@pytest.fixture
def manager(store, delivery, clock):
    from otp_reset.otp import OtpConfig, OtpLifecycleManager

    return OtpLifecycleManager(store, delivery, config=OtpConfig(), clock=clock)


@pytest.fixture
def fake_provider():
    return FakeProvider()
