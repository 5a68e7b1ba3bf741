"""
Password Reset
==============
Burns a verified OTP, then creates or updates the identity account
derived from the phone key.
"""

from typing import Any, Optional

import structlog

from otp_reset import metrics
from otp_reset.errors import IdentityStoreError, InvalidInput
from otp_reset.identity.base import Account, AccountNotFound, IdentityStore
from otp_reset.logging import mask_phone

from .manager import OtpLifecycleManager, _is_blank
from .phone import to_e164

logger = structlog.get_logger(__name__)

RESET_REQUIRED = "phone, otp and newPassword are required"


class PasswordResetService:
    """
    Password reset orchestrator.

    Only runs the identity mutation after OtpLifecycleManager.consume_for_reset
    has succeeded. It never re-validates the OTP.
    """

    def __init__(
        self,
        manager: OtpLifecycleManager,
        identity_store: IdentityStore,
        email_domain: str = "userapp.com",
        country_code: str = "91",
    ):
        self.manager = manager
        self.identity_store = identity_store
        self.email_domain = email_domain
        self.country_code = country_code

    def derive_email(self, phone_key: str) -> str:
        return f"{phone_key}@{self.email_domain}"

    async def reset_password(
        self,
        raw_phone: Optional[str],
        code: Any,
        new_password: Any,
    ) -> Account:
        """
        Consume the OTP and set the account credential to new_password.

        The OTP is burned before the identity store is touched, so a
        downstream failure still leaves the code unusable.

        Raises:
            InvalidInput, OtpNotFound, OtpExpired, OtpMismatch,
            InfrastructureError, IdentityStoreError
        """
        # newPassword is taken verbatim, so only an absent or empty one is missing
        if _is_blank(raw_phone) or _is_blank(code) or new_password is None or str(new_password) == "":
            raise InvalidInput(RESET_REQUIRED)

        phone_key = await self.manager.consume_for_reset(raw_phone, code, RESET_REQUIRED)
        return await self.apply_new_password(phone_key, str(new_password))

    async def apply_new_password(self, phone_key: str, new_password: str) -> Account:
        """Create-or-update the account for a phone key whose OTP is already consumed."""
        email = self.derive_email(phone_key)
        masked = mask_phone(phone_key)

        try:
            try:
                account = await self.identity_store.get_user_by_email(email)
            except AccountNotFound:
                account = await self.identity_store.create_user(
                    email=email,
                    phone_number=to_e164(phone_key, self.country_code),
                    password=new_password,
                )
                metrics.record_reset("created")
                logger.info("Password reset created account", phone=masked, uid=account.uid)
                return account

            await self.identity_store.update_password(account.uid, new_password)
        except IdentityStoreError:
            metrics.record_reset("failed")
            raise
        except Exception as e:
            metrics.record_reset("failed")
            logger.exception("Identity store call failed", phone=masked)
            raise IdentityStoreError(details=str(e)) from e

        metrics.record_reset("updated")
        logger.info("Password reset updated account", phone=masked, uid=account.uid)
        return account
