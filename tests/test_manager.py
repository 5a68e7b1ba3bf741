"""
Unit Tests for the OTP Lifecycle Manager
========================================
Issue, verify and consume against the in-memory store with a fake clock.
"""

import asyncio

import pytest

PHONE = "9876543210"


def _sample(name, labels):
    from otp_reset.metrics import OTP_REGISTRY

    return OTP_REGISTRY.get_sample_value(name, labels) or 0.0


class TestRequestOtp:
    """Tests for OTP issuance."""

    @pytest.mark.asyncio
    async def test_request_stores_hash_and_delivers(self, manager, store, delivery):
        """Plaintext goes to delivery, only the hash is stored."""
        await manager.request_otp(PHONE)

        phone_key, code = delivery.sent[-1]
        assert phone_key == PHONE
        record = await store.get(PHONE)
        assert record is not None
        assert record.code_hash != code
        assert len(record.code_hash) == 64

    @pytest.mark.asyncio
    async def test_record_timestamps(self, manager, store, clock):
        """expiresAt is createdAt plus five minutes, in milliseconds."""
        await manager.request_otp(PHONE)

        record = await store.get(PHONE)
        assert record.created_at == int(clock() * 1000)
        assert record.expires_at - record.created_at == 300_000

    @pytest.mark.asyncio
    async def test_request_normalizes_phone(self, manager, store, delivery):
        """Formatted numbers share one key."""
        await manager.request_otp("+91 98765-43210")

        assert PHONE in store
        assert delivery.sent[-1][0] == PHONE

    @pytest.mark.asyncio
    async def test_missing_phone(self, manager, store):
        """No phone means InvalidInput and no write."""
        from otp_reset.errors import InvalidInput

        with pytest.raises(InvalidInput) as exc:
            await manager.request_otp(None)
        assert exc.value.message == "phone is required"
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_resend_invalidates_previous_code(self, manager, monkeypatch):
        """Only the latest code for a phone is valid."""
        from otp_reset.errors import OtpMismatch

        codes = iter(["111111", "222222"])
        monkeypatch.setattr("otp_reset.otp.manager.generate_otp", lambda length: next(codes))

        await manager.request_otp(PHONE)
        await manager.request_otp(PHONE)

        with pytest.raises(OtpMismatch):
            await manager.verify_otp(PHONE, "111111")
        assert await manager.verify_otp(PHONE, "222222") is True

    @pytest.mark.asyncio
    async def test_delivery_failure_discards_record(self, manager, store, delivery):
        """A code that never reached the user is not left verifiable."""
        from otp_reset.errors import DeliveryFailed

        delivery.fail = True
        with pytest.raises(DeliveryFailed):
            await manager.request_otp(PHONE)
        assert PHONE not in store

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_record_when_disabled(self, store, delivery, clock):
        """Discarding is configurable."""
        from otp_reset.errors import DeliveryFailed
        from otp_reset.otp import OtpConfig, OtpLifecycleManager

        manager = OtpLifecycleManager(
            store, delivery, config=OtpConfig(discard_on_delivery_failure=False), clock=clock
        )
        delivery.fail = True
        with pytest.raises(DeliveryFailed):
            await manager.request_otp(PHONE)
        assert PHONE in store

    @pytest.mark.asyncio
    async def test_discard_spares_newer_record(self, manager, store):
        """Only the undelivered record itself is removed."""
        from otp_reset.otp import OtpRecord

        undelivered = OtpRecord(code_hash="old", expires_at=2, created_at=1)
        newer = OtpRecord(code_hash="new", expires_at=4, created_at=3)
        await store.put(PHONE, newer)

        await manager._discard_undelivered(PHONE, undelivered)
        assert await store.get(PHONE) == newer

    @pytest.mark.asyncio
    async def test_delivery_timeout(self, store, delivery, clock):
        """A hung gateway surfaces as DeliveryFailed."""
        from otp_reset.errors import DeliveryFailed
        from otp_reset.otp import OtpConfig, OtpLifecycleManager

        manager = OtpLifecycleManager(
            store, delivery, config=OtpConfig(delivery_timeout_seconds=0.05), clock=clock
        )
        delivery.delay = 1.0
        with pytest.raises(DeliveryFailed) as exc:
            await manager.request_otp(PHONE)
        assert exc.value.message == "Failed to send OTP"
        assert PHONE not in store

    @pytest.mark.asyncio
    async def test_delivery_crash_is_delivery_failed(self, store, clock):
        """An unexpected error from delivery is reported as DeliveryFailed."""
        from otp_reset.errors import DeliveryFailed
        from otp_reset.otp import OtpConfig, OtpDelivery, OtpLifecycleManager

        class BrokenDelivery(OtpDelivery):
            async def deliver(self, phone_key, code):
                raise RuntimeError("socket closed")

        manager = OtpLifecycleManager(store, BrokenDelivery(), config=OtpConfig(), clock=clock)
        before = _sample("otp_requests_total", {"outcome": "delivery_failed"})

        with pytest.raises(DeliveryFailed) as exc:
            await manager.request_otp(PHONE)

        assert exc.value.message == "Failed to send OTP"
        assert exc.value.details == "socket closed"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert PHONE not in store
        assert _sample("otp_requests_total", {"outcome": "delivery_failed"}) == before + 1

    @pytest.mark.asyncio
    async def test_gateway_array_body(self, store, clock):
        """A Fast2SMS 502 with a JSON array body fails the request cleanly."""
        import httpx

        from otp_reset.errors import DeliveryFailed
        from otp_reset.otp import OtpConfig, OtpLifecycleManager, SmsOtpDelivery
        from otp_reset.providers import Fast2SMSAdapter

        adapter = Fast2SMSAdapter(
            {"api_key": "f2s-key"},
            transport=httpx.MockTransport(lambda request: httpx.Response(502, json=["bad gateway"])),
        )
        await adapter.initialize()
        manager = OtpLifecycleManager(store, SmsOtpDelivery(adapter), config=OtpConfig(), clock=clock)

        try:
            with pytest.raises(DeliveryFailed):
                await manager.request_otp(PHONE)
        finally:
            await adapter.close()
        assert PHONE not in store

    @pytest.mark.asyncio
    async def test_sent_metric(self, manager):
        """Successful sends are counted."""
        before = _sample("otp_requests_total", {"outcome": "sent"})
        await manager.request_otp(PHONE)
        assert _sample("otp_requests_total", {"outcome": "sent"}) == before + 1


class TestVerifyOtp:
    """Tests for non-destructive verification."""

    @pytest.mark.asyncio
    async def test_verify_success_is_repeatable(self, manager, store, delivery):
        """Verification does not consume the record."""
        await manager.request_otp(PHONE)
        code = delivery.last_code

        assert await manager.verify_otp(PHONE, code) is True
        assert await manager.verify_otp(PHONE, code) is True
        assert PHONE in store

    @pytest.mark.asyncio
    async def test_verify_with_formatted_phone(self, manager, delivery):
        """A differently formatted phone finds the same record."""
        await manager.request_otp("+91 98765-43210")

        assert await manager.verify_otp("09876543210", delivery.last_code) is True

    @pytest.mark.asyncio
    async def test_numeric_code(self, manager, delivery):
        """Codes submitted as numbers are compared as text."""
        await manager.request_otp(PHONE)

        assert await manager.verify_otp(PHONE, int(delivery.last_code)) is True

    @pytest.mark.asyncio
    async def test_mismatch_keeps_record(self, manager, store, delivery):
        """A wrong code leaves the record for another attempt."""
        from otp_reset.errors import OtpMismatch

        await manager.request_otp(PHONE)
        with pytest.raises(OtpMismatch) as exc:
            await manager.verify_otp(PHONE, "000000")
        assert exc.value.message == "Invalid OTP"
        assert exc.value.status_code == 400

        assert PHONE in store
        assert await manager.verify_otp(PHONE, delivery.last_code) is True

    @pytest.mark.asyncio
    async def test_not_found(self, manager):
        """Unknown phone has no record."""
        from otp_reset.errors import OtpNotFound

        with pytest.raises(OtpNotFound) as exc:
            await manager.verify_otp(PHONE, "123456")
        assert exc.value.message == "OTP not found or already used"

    @pytest.mark.asyncio
    async def test_valid_at_expiry_instant(self, manager, delivery, clock):
        """The code still verifies exactly at expiresAt."""
        await manager.request_otp(PHONE)
        clock.advance(300)

        assert await manager.verify_otp(PHONE, delivery.last_code) is True

    @pytest.mark.asyncio
    async def test_expired_is_deleted(self, manager, store, delivery, clock):
        """Expired records are removed, then reported as not found."""
        from otp_reset.errors import OtpExpired, OtpNotFound

        await manager.request_otp(PHONE)
        code = delivery.last_code
        clock.advance(301)

        with pytest.raises(OtpExpired) as exc:
            await manager.verify_otp(PHONE, code)
        assert exc.value.message == "OTP expired"
        assert PHONE not in store

        with pytest.raises(OtpNotFound):
            await manager.verify_otp(PHONE, code)

    @pytest.mark.asyncio
    async def test_expired_wrong_code_reports_expired(self, manager, store, clock):
        """Expiry is checked before the code."""
        from otp_reset.errors import OtpExpired

        await manager.request_otp(PHONE)
        clock.advance(600)

        with pytest.raises(OtpExpired):
            await manager.verify_otp(PHONE, "000000")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("phone,code", [(None, "123456"), (PHONE, None), ("", "123456"), (PHONE, "  ")])
    async def test_missing_fields(self, manager, phone, code):
        """Both phone and otp are required."""
        from otp_reset.errors import InvalidInput

        with pytest.raises(InvalidInput) as exc:
            await manager.verify_otp(phone, code)
        assert exc.value.message == "phone and otp are required"

    @pytest.mark.asyncio
    async def test_store_timeout(self, delivery, clock):
        """A store that does not answer in time is an infrastructure error."""
        from otp_reset.errors import InfrastructureError
        from otp_reset.otp import OtpConfig, OtpLifecycleManager
        from otp_reset.store import InMemoryOtpStore

        class SlowStore(InMemoryOtpStore):
            async def get(self, key):
                await asyncio.sleep(1.0)
                return await super().get(key)

        manager = OtpLifecycleManager(
            SlowStore(), delivery, config=OtpConfig(store_timeout_seconds=0.05), clock=clock
        )
        with pytest.raises(InfrastructureError) as exc:
            await manager.verify_otp(PHONE, "123456")
        assert exc.value.status_code == 500


class TestConsumeForReset:
    """Tests for single-use consumption."""

    @pytest.mark.asyncio
    async def test_consume_once(self, manager, store, delivery):
        """A consumed code cannot be used again."""
        from otp_reset.errors import OtpNotFound

        await manager.request_otp("+91 98765-43210")
        code = delivery.last_code

        assert await manager.consume_for_reset("9876543210", code) == PHONE
        assert PHONE not in store

        with pytest.raises(OtpNotFound):
            await manager.consume_for_reset(PHONE, code)
        with pytest.raises(OtpNotFound):
            await manager.verify_otp(PHONE, code)

    @pytest.mark.asyncio
    async def test_verify_then_consume(self, manager, delivery):
        """Verification leaves the code usable for a reset."""
        await manager.request_otp(PHONE)
        code = delivery.last_code

        await manager.verify_otp(PHONE, code)
        assert await manager.consume_for_reset(PHONE, code) == PHONE

    @pytest.mark.asyncio
    async def test_consume_mismatch_keeps_record(self, manager, store):
        """A wrong code does not burn the record."""
        from otp_reset.errors import OtpMismatch

        await manager.request_otp(PHONE)
        with pytest.raises(OtpMismatch):
            await manager.consume_for_reset(PHONE, "000000")
        assert PHONE in store

    @pytest.mark.asyncio
    async def test_consume_after_resend_uses_latest(self, manager, monkeypatch):
        """The newest code is the one consumed."""
        from otp_reset.errors import OtpMismatch

        codes = iter(["333333", "444444"])
        monkeypatch.setattr("otp_reset.otp.manager.generate_otp", lambda length: next(codes))

        await manager.request_otp(PHONE)
        await manager.request_otp(PHONE)

        with pytest.raises(OtpMismatch):
            await manager.consume_for_reset(PHONE, "333333")
        assert await manager.consume_for_reset(PHONE, "444444") == PHONE

    @pytest.mark.asyncio
    async def test_concurrent_consumes_can_both_pass(self, delivery, clock):
        """Known race: two consumes that both read before either deletes both succeed."""
        from otp_reset.otp import OtpLifecycleManager
        from otp_reset.store import InMemoryOtpStore

        class RacingStore(InMemoryOtpStore):
            def __init__(self):
                super().__init__()
                self.reads = 0
                self.both_read = asyncio.Event()

            async def get(self, key):
                record = await super().get(key)
                self.reads += 1
                if self.reads >= 2:
                    self.both_read.set()
                await self.both_read.wait()
                return record

        manager = OtpLifecycleManager(RacingStore(), delivery, clock=clock)
        await manager.request_otp(PHONE)
        code = delivery.last_code

        results = await asyncio.gather(
            manager.consume_for_reset(PHONE, code),
            manager.consume_for_reset(PHONE, code),
        )
        assert results == [PHONE, PHONE]

    @pytest.mark.asyncio
    async def test_custom_required_message(self, manager):
        """Callers choose the message for missing fields."""
        from otp_reset.errors import InvalidInput

        with pytest.raises(InvalidInput) as exc:
            await manager.consume_for_reset(PHONE, "", "phone, otp and newPassword are required")
        assert exc.value.message == "phone, otp and newPassword are required"
