"""
OTP Lifecycle Manager
=====================
Issues, verifies and consumes OTPs for phone keys.

States per phone key:
- NONE: no record
- PENDING: record exists and is unexpired
- EXPIRED: record exists past expiresAt (deleted on next access)
- CONSUMED: record deleted after a successful reset

Expiry is checked lazily when a record is read. There is no sweeper.
"""

import asyncio
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Tuple, TypeVar

import structlog

from otp_reset import metrics
from otp_reset.errors import (
    DeliveryFailed,
    InfrastructureError,
    InvalidInput,
    OtpExpired,
    OtpMismatch,
    OtpNotFound,
    OtpServiceError,
)
from otp_reset.logging import mask_phone

if TYPE_CHECKING:
    from otp_reset.store.base import OtpStore

from .delivery import OtpDelivery
from .hashing import generate_otp, hash_otp, verify_otp_hash
from .models import OtpConfig, OtpRecord
from .phone import normalize_phone_key

logger = structlog.get_logger(__name__)

T = TypeVar("T")

VERIFY_REQUIRED = "phone and otp are required"


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


class OtpLifecycleManager:
    """
    Orchestrates generate -> store -> deliver -> verify -> consume.

    The manager is the only writer and deleter of OTP records. Store and
    delivery collaborators are injected once and reused across requests.
    """

    def __init__(
        self,
        store: "OtpStore",
        delivery: OtpDelivery,
        config: Optional[OtpConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            store: OTP record store
            delivery: Channel for plaintext codes
            config: Lifecycle configuration
            clock: Returns the current time in epoch seconds
        """
        self.store = store
        self.delivery = delivery
        self.config = config or OtpConfig()
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _store_call(self, operation: str, call: Awaitable[T]) -> T:
        """Run one store operation under the store timeout."""
        try:
            return await asyncio.wait_for(call, timeout=self.config.store_timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.error("OTP store timed out", operation=operation)
            raise InfrastructureError(details=f"store {operation} timed out") from e

    async def request_otp(self, raw_phone: Optional[str]) -> None:
        """
        Issue a new OTP for the phone and hand it to the delivery channel.

        Overwrites any pending or expired record for the same phone key.
        The plaintext code is never returned.

        Raises:
            InvalidInput: phone missing or without digits
            InfrastructureError: store unavailable
            DeliveryFailed: gateway refused, failed or timed out
        """
        try:
            phone_key = normalize_phone_key(raw_phone)

            code = generate_otp(self.config.length)
            now = self._now_ms()
            record = OtpRecord(
                code_hash=hash_otp(code, self.config.hash_secret),
                expires_at=now + self.config.ttl_seconds * 1000,
                created_at=now,
            )
            await self._store_call("put", self.store.put(phone_key, record))

            try:
                await asyncio.wait_for(
                    self.delivery.deliver(phone_key, code),
                    timeout=self.config.delivery_timeout_seconds,
                )
            except asyncio.TimeoutError as e:
                await self._discard_undelivered(phone_key, record)
                raise DeliveryFailed(details="delivery timed out") from e
            except OtpServiceError:
                await self._discard_undelivered(phone_key, record)
                raise
            except Exception as e:
                await self._discard_undelivered(phone_key, record)
                logger.exception("OTP delivery raised", phone=mask_phone(phone_key))
                raise DeliveryFailed(details=str(e)) from e
        except OtpServiceError as e:
            metrics.record_request(e.code.lower())
            raise

        metrics.record_request("sent")
        logger.info(
            "OTP issued",
            phone=mask_phone(phone_key),
            expires_in=self.config.ttl_seconds,
        )

    async def _discard_undelivered(self, phone_key: str, record: OtpRecord) -> None:
        """Drop a record whose code never reached the user, unless a newer one replaced it."""
        if not self.config.discard_on_delivery_failure:
            return
        try:
            current = await self._store_call("get", self.store.get(phone_key))
            if current is not None and current.code_hash == record.code_hash:
                await self._store_call("delete", self.store.delete(phone_key))
                logger.info("Undelivered OTP discarded", phone=mask_phone(phone_key))
        except InfrastructureError:
            logger.error("Failed to discard undelivered OTP", phone=mask_phone(phone_key))

    async def _check(
        self,
        operation: str,
        raw_phone: Optional[str],
        code: Any,
        required_message: str,
    ) -> Tuple[str, OtpRecord]:
        """Shared validation for verify and consume. Returns the phone key and live record."""
        if _is_blank(raw_phone) or _is_blank(code):
            raise InvalidInput(required_message)

        phone_key = normalize_phone_key(raw_phone, required_message)
        masked = mask_phone(phone_key)

        record = await self._store_call("get", self.store.get(phone_key))
        if record is None:
            logger.info("OTP not found", operation=operation, phone=masked)
            raise OtpNotFound()

        if record.is_expired(self._now_ms()):
            await self._store_call("delete", self.store.delete(phone_key))
            logger.info("OTP expired", operation=operation, phone=masked)
            raise OtpExpired()

        if not verify_otp_hash(str(code).strip(), record.code_hash, self.config.hash_secret):
            logger.warning("Invalid OTP attempt", operation=operation, phone=masked)
            raise OtpMismatch()

        return phone_key, record

    async def verify_otp(self, raw_phone: Optional[str], code: Any) -> bool:
        """
        Check a submitted code without consuming it.

        The record stays in place on success, so the same code can still
        be used for a reset within the TTL.

        Raises:
            InvalidInput, OtpNotFound, OtpExpired, OtpMismatch, InfrastructureError
        """
        try:
            phone_key, _ = await self._check("verify", raw_phone, code, VERIFY_REQUIRED)
        except OtpServiceError as e:
            metrics.record_verification("verify", e.code.lower())
            raise

        metrics.record_verification("verify", "verified")
        logger.info("OTP verified", phone=mask_phone(phone_key))
        return True

    async def consume_for_reset(
        self,
        raw_phone: Optional[str],
        code: Any,
        required_message: str = VERIFY_REQUIRED,
    ) -> str:
        """
        Check a submitted code and burn it.

        The record is deleted before this returns, so any downstream
        failure leaves the code unusable.

        Returns:
            The phone key the code was issued for

        Raises:
            InvalidInput, OtpNotFound, OtpExpired, OtpMismatch, InfrastructureError
        """
        try:
            phone_key, _ = await self._check("consume", raw_phone, code, required_message)
            await self._store_call("delete", self.store.delete(phone_key))
        except OtpServiceError as e:
            metrics.record_verification("consume", e.code.lower())
            raise

        metrics.record_verification("consume", "consumed")
        logger.info("OTP consumed", phone=mask_phone(phone_key))
        return phone_key
