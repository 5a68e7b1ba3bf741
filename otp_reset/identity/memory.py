"""
In-Memory Identity Store
========================
Process-local account directory for development and testing.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

import structlog

from otp_reset.errors import IdentityStoreError

from .base import Account, AccountNotFound, IdentityStore
from .password import hash_password, verify_password

logger = structlog.get_logger(__name__)


@dataclass
class _StoredAccount:
    account: Account
    password_hash: str


class InMemoryIdentityStore(IdentityStore):
    """Dict-backed identity store. Passwords are kept as Argon2id hashes."""

    name = "memory"

    def __init__(self):
        self._accounts: Dict[str, _StoredAccount] = {}
        self._by_email: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get_user_by_email(self, email: str) -> Account:
        async with self._lock:
            uid = self._by_email.get(email.lower())
            if uid is None:
                raise AccountNotFound(email)
            return self._accounts[uid].account

    async def create_user(self, email: str, phone_number: str, password: str) -> Account:
        password_hash = await hash_password(password)
        async with self._lock:
            if email.lower() in self._by_email:
                raise IdentityStoreError(details=f"account already exists: {email}")
            account = Account(uid=uuid.uuid4().hex, email=email, phone_number=phone_number)
            self._accounts[account.uid] = _StoredAccount(account, password_hash)
            self._by_email[email.lower()] = account.uid

        logger.info("Identity account created", uid=account.uid)
        return account

    async def update_password(self, uid: str, password: str) -> None:
        password_hash = await hash_password(password)
        async with self._lock:
            stored = self._accounts.get(uid)
            if stored is None:
                raise IdentityStoreError(details=f"unknown uid: {uid}")
            stored.password_hash = password_hash

        logger.info("Identity password updated", uid=uid)

    async def check_password(self, email: str, password: str) -> bool:
        """True if password matches the account's current credential."""
        async with self._lock:
            uid = self._by_email.get(email.lower())
            stored: Optional[_StoredAccount] = self._accounts.get(uid) if uid else None
        if stored is None:
            return False
        return await verify_password(password, stored.password_hash)

    def __len__(self) -> int:
        return len(self._accounts)
