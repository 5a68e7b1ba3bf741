"""
Identity Store Interface
========================
Account directory where password resets land.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class AccountNotFound(Exception):
    """Lookup found no account for the given email."""


@dataclass
class Account:
    uid: str
    email: str
    phone_number: Optional[str] = None


class IdentityStore(ABC):
    """
    External account directory.

    Implementations raise AccountNotFound from get_user_by_email when no
    account exists, and IdentityStoreError for any other failure.
    """

    name: str = "base"

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Account:
        ...

    @abstractmethod
    async def create_user(self, email: str, phone_number: str, password: str) -> Account:
        ...

    @abstractmethod
    async def update_password(self, uid: str, password: str) -> None:
        ...

    async def health_check(self) -> bool:
        return True
