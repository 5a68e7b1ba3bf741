"""
HashiCorp Vault Client
======================
Optional secret source for SMS provider credentials.

Usage:
    vault = SecretsVault(url="https://vault.internal", token="...")
    creds = vault.get_api_credentials("twilio")
"""

from typing import Any, Dict, Optional

import hvac
from hvac.exceptions import InvalidPath
import structlog

logger = structlog.get_logger(__name__)

# Vault key -> Settings field, per provider
PROVIDER_SECRET_FIELDS = {
    "fast2sms": {"API_KEY": "fast2sms_api_key"},
    "twilio": {
        "ACCOUNT_SID": "twilio_account_sid",
        "AUTH_TOKEN": "twilio_auth_token",
        "PHONE_NUMBER": "twilio_phone_number",
    },
}


class SecretsVault:
    """HashiCorp Vault KV v2 reader."""

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        mount_point: str = "otp-reset",
        client: Optional[hvac.Client] = None,
    ):
        self.url = url
        self.token = token
        self.mount_point = mount_point
        self._client = client

    @property
    def client(self) -> hvac.Client:
        """Lazy-loaded Vault client."""
        if self._client is None:
            self._client = hvac.Client(url=self.url, token=self.token)
            if not self._client.is_authenticated():
                raise ValueError("Vault authentication failed. Check VAULT_TOKEN.")
        return self._client

    def get_secret(self, path: str) -> Dict[str, Any]:
        """
        Get a secret from Vault KV v2.

        Args:
            path: Secret path (e.g., "api-keys/twilio")

        Returns:
            Dictionary of secret key-value pairs
        """
        try:
            secret = self.client.secrets.kv.v2.read_secret_version(
                path=path,
                mount_point=self.mount_point,
            )
        except InvalidPath:
            logger.error("Secret not found", path=f"{self.mount_point}/{path}")
            raise
        return secret["data"]["data"]

    def get_api_credentials(self, service: str) -> Dict[str, str]:
        return self.get_secret(f"api-keys/{service}")


def load_provider_secrets(settings, vault: Optional[SecretsVault] = None):
    """
    Fill empty SMS provider credentials in settings from Vault.

    Returns settings unchanged when no Vault is configured. Values already
    set in the environment win over Vault.
    """
    if vault is None:
        if not settings.vault_addr:
            return settings
        vault = SecretsVault(
            url=settings.vault_addr,
            token=settings.vault_token,
            mount_point=settings.vault_mount,
        )

    fields = PROVIDER_SECRET_FIELDS.get(settings.sms_provider)
    if not fields:
        return settings

    creds = vault.get_api_credentials(settings.sms_provider)
    overrides = {
        attr: creds[key]
        for key, attr in fields.items()
        if key in creds and not getattr(settings, attr)
    }
    logger.info(
        "Provider credentials loaded from Vault",
        provider=settings.sms_provider,
        fields=sorted(overrides),
    )
    return settings.with_overrides(**overrides)
