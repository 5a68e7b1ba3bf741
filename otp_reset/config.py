"""
Service Configuration
=====================
Settings for the OTP service, read from environment variables.
"""

import os
from dataclasses import dataclass, field, replace
from typing import List, Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.environ.get(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration for the OTP service."""

    # Service
    service_name: str = "otp-reset"
    version: str = "1.0.0"
    log_level: str = "INFO"
    log_json: bool = True
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # OTP lifecycle
    otp_ttl_seconds: int = 300  # 5 minutes
    otp_length: int = 6
    otp_hash_secret: str = ""
    otp_retention_seconds: int = 3600
    store_timeout_seconds: float = 5.0
    delivery_timeout_seconds: float = 10.0
    discard_on_delivery_failure: bool = True

    # OTP store
    store_backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"

    # SMS
    sms_provider: str = "fast2sms"
    sms_country_code: str = "91"
    fast2sms_api_key: str = ""
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""

    # Identity store
    identity_backend: str = "memory"
    identity_service_url: str = "http://localhost:8001"
    identity_service_key: str = ""
    identity_email_domain: str = "userapp.com"

    # Vault
    vault_addr: Optional[str] = None
    vault_token: Optional[str] = None
    vault_mount: str = "otp-reset"

    @property
    def retention_seconds(self) -> int:
        """Store housekeeping expiry, never shorter than the OTP TTL."""
        return max(self.otp_retention_seconds, self.otp_ttl_seconds)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            service_name=os.environ.get("SERVICE_NAME", "otp-reset"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
            cors_origins=_env_list("CORS_ORIGINS", "*"),
            otp_ttl_seconds=int(os.environ.get("OTP_TTL_SECONDS", "300")),
            otp_length=int(os.environ.get("OTP_LENGTH", "6")),
            otp_hash_secret=os.environ.get("OTP_HASH_SECRET", ""),
            otp_retention_seconds=int(os.environ.get("OTP_RETENTION_SECONDS", "3600")),
            store_timeout_seconds=float(os.environ.get("OTP_STORE_TIMEOUT_SECONDS", "5")),
            delivery_timeout_seconds=float(os.environ.get("OTP_DELIVERY_TIMEOUT_SECONDS", "10")),
            discard_on_delivery_failure=_env_bool("OTP_DISCARD_ON_DELIVERY_FAILURE", True),
            store_backend=os.environ.get("OTP_STORE_BACKEND", "memory").lower(),
            redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
            sms_provider=os.environ.get("SMS_PROVIDER", "fast2sms").lower(),
            sms_country_code=os.environ.get("SMS_COUNTRY_CODE", "91"),
            fast2sms_api_key=os.environ.get("FAST2SMS_API_KEY", ""),
            twilio_account_sid=os.environ.get("TWILIO_ACCOUNT_SID", ""),
            twilio_auth_token=os.environ.get("TWILIO_AUTH_TOKEN", ""),
            twilio_phone_number=os.environ.get("TWILIO_PHONE_NUMBER", ""),
            identity_backend=os.environ.get("IDENTITY_BACKEND", "memory").lower(),
            identity_service_url=os.environ.get("IDENTITY_SERVICE_URL", "http://localhost:8001"),
            identity_service_key=os.environ.get("IDENTITY_SERVICE_KEY", ""),
            identity_email_domain=os.environ.get("IDENTITY_EMAIL_DOMAIN", "userapp.com"),
            vault_addr=os.environ.get("VAULT_ADDR") or None,
            vault_token=os.environ.get("VAULT_TOKEN") or None,
            vault_mount=os.environ.get("VAULT_MOUNT", "otp-reset"),
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)
