"""
OTP Models
==========
Data models for OTP records and lifecycle configuration.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class OtpConfig:
    """Configuration for OTP issuance and verification."""
    length: int = 6
    ttl_seconds: int = 300  # 5 minutes
    hash_secret: str = ""
    store_timeout_seconds: float = 5.0
    delivery_timeout_seconds: float = 10.0
    discard_on_delivery_failure: bool = True

    @classmethod
    def from_settings(cls, settings) -> "OtpConfig":
        return cls(
            length=settings.otp_length,
            ttl_seconds=settings.otp_ttl_seconds,
            hash_secret=settings.otp_hash_secret,
            store_timeout_seconds=settings.store_timeout_seconds,
            delivery_timeout_seconds=settings.delivery_timeout_seconds,
            discard_on_delivery_failure=settings.discard_on_delivery_failure,
        )


@dataclass(frozen=True)
class OtpRecord:
    """
    The one live OTP for a phone key.

    Timestamps are epoch milliseconds. The plaintext code is never stored.
    """
    code_hash: str
    expires_at: int
    created_at: int

    def is_expired(self, now_ms: int) -> bool:
        return now_ms > self.expires_at

    def to_document(self) -> Dict[str, Any]:
        """Persisted layout: codeHash, expiresAt, createdAt."""
        return {
            "codeHash": self.code_hash,
            "expiresAt": self.expires_at,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "OtpRecord":
        return cls(
            code_hash=data["codeHash"],
            expires_at=int(data["expiresAt"]),
            created_at=int(data.get("createdAt", 0)),
        )
