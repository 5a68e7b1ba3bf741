"""
HTTP Identity Store
===================
Identity store backed by an internal account service.

Endpoints used:
    GET   /users/by-email?email=...   -> 200 {uid, email, phoneNumber} | 404
    POST  /users                      -> 201 {uid, email, phoneNumber}
    PATCH /users/{uid}                -> 200 | 204
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from otp_reset.errors import IdentityStoreError
from otp_reset.http import BaseInternalClient, InternalServiceError, NotFoundError

from .base import Account, AccountNotFound, IdentityStore

logger = structlog.get_logger(__name__)


def _to_account(data: Optional[Dict[str, Any]]) -> Account:
    if not data or "uid" not in data:
        raise IdentityStoreError(details="identity service returned no account")
    return Account(
        uid=str(data["uid"]),
        email=data.get("email", ""),
        phone_number=data.get("phoneNumber"),
    )


class HttpIdentityStore(IdentityStore):
    """Identity store talking to the account service over HTTP."""

    name = "http"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_multiplier: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = BaseInternalClient(
            base_url=base_url,
            service_name="identity",
            api_key=api_key,
            timeout=timeout,
            max_attempts=max_attempts,
            backoff_multiplier=backoff_multiplier,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def get_user_by_email(self, email: str) -> Account:
        try:
            data = await self.client.get("/users/by-email", params={"email": email})
        except NotFoundError as e:
            raise AccountNotFound(email) from e
        except InternalServiceError as e:
            logger.error("Identity lookup failed", error=str(e))
            raise IdentityStoreError(details=str(e)) from e
        return _to_account(data)

    async def create_user(self, email: str, phone_number: str, password: str) -> Account:
        try:
            data = await self.client.post(
                "/users",
                json={"email": email, "phoneNumber": phone_number, "password": password},
            )
        except InternalServiceError as e:
            logger.error("Identity create failed", error=str(e))
            raise IdentityStoreError(details=str(e)) from e
        return _to_account(data)

    async def update_password(self, uid: str, password: str) -> None:
        try:
            await self.client.patch(f"/users/{uid}", json={"password": password})
        except InternalServiceError as e:
            logger.error("Identity password update failed", uid=uid, error=str(e))
            raise IdentityStoreError(details=str(e)) from e

    async def health_check(self) -> bool:
        try:
            await self.client.get("/health")
            return True
        except InternalServiceError:
            return False
