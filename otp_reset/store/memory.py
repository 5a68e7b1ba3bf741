"""
In-Memory OTP Store
===================
Process-local OTP store for development and testing.
"""

import asyncio
from typing import Dict, Optional

from otp_reset.otp.models import OtpRecord

from .base import OtpStore


class InMemoryOtpStore(OtpStore):
    """
    Dict-backed OTP store.

    For development and testing only.
    Use RedisOtpStore when more than one process serves requests.
    """

    name = "memory"

    def __init__(self):
        self._records: Dict[str, OtpRecord] = {}
        self._lock = asyncio.Lock()

    async def put(self, key: str, record: OtpRecord) -> None:
        async with self._lock:
            self._records[key] = record

    async def get(self, key: str) -> Optional[OtpRecord]:
        async with self._lock:
            return self._records.get(key)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._records.pop(key, None)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records
