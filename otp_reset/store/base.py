"""
OTP Store Interface
===================
Per-key persistence for OTP records.
"""

from abc import ABC, abstractmethod
from typing import Optional

from otp_reset.otp.models import OtpRecord


class OtpStore(ABC):
    """
    Abstract key-value store holding at most one OtpRecord per phone key.

    Implementations must give read-your-write on a single key and raise
    InfrastructureError when the backend is unavailable.
    """

    name: str = "base"

    async def initialize(self) -> None:
        """Open connections."""

    async def close(self) -> None:
        """Release connections."""

    @abstractmethod
    async def put(self, key: str, record: OtpRecord) -> None:
        """Unconditionally write the record for key, replacing any existing one."""

    @abstractmethod
    async def get(self, key: str) -> Optional[OtpRecord]:
        """Return the current record for key, or None."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the record for key. Deleting an absent key is not an error."""

    async def health_check(self) -> bool:
        return True
