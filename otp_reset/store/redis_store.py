"""
Redis OTP Store
===============
Redis-backed OTP store. One JSON document per phone key.
"""

import json
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError
import structlog

from otp_reset.errors import InfrastructureError
from otp_reset.otp.models import OtpRecord

from .base import OtpStore

logger = structlog.get_logger(__name__)


class RedisOtpStore(OtpStore):
    """
    Redis-backed OTP store.

    Each record is a single SET/GET/DEL on one key, so single-key operations
    are atomic at the server. Keys carry a housekeeping expiry
    (retention_seconds) longer than the OTP TTL; OTP expiry itself is
    decided from expiresAt when the record is read.
    """

    name = "redis"

    def __init__(
        self,
        redis_client,
        retention_seconds: int = 3600,
        key_prefix: str = "otp_requests",
    ):
        """
        Args:
            redis_client: Async Redis client (decode_responses=True)
            retention_seconds: Expiry applied to each key on write
            key_prefix: Namespace for OTP keys
        """
        self.redis = redis_client
        self.retention_seconds = retention_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "RedisOtpStore":
        client = aioredis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def close(self) -> None:
        await self.redis.aclose()
        logger.info("Redis OTP store closed")

    async def put(self, key: str, record: OtpRecord) -> None:
        payload = json.dumps(record.to_document(), separators=(",", ":"))
        try:
            await self.redis.set(self._key(key), payload, ex=self.retention_seconds)
        except RedisError as e:
            logger.error("Redis OTP write failed", error=str(e))
            raise InfrastructureError(details=str(e)) from e

    async def get(self, key: str) -> Optional[OtpRecord]:
        try:
            raw = await self.redis.get(self._key(key))
        except RedisError as e:
            logger.error("Redis OTP read failed", error=str(e))
            raise InfrastructureError(details=str(e)) from e

        if raw is None:
            return None
        return OtpRecord.from_document(json.loads(raw))

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(self._key(key))
        except RedisError as e:
            logger.error("Redis OTP delete failed", error=str(e))
            raise InfrastructureError(details=str(e)) from e

    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False
