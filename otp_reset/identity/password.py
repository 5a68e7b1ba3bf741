"""
Password Hashing
================
Async-safe Argon2id hashing for credentials held by the in-memory identity store.
"""

import asyncio
from functools import lru_cache

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerifyMismatchError


@lru_cache(maxsize=1)
def get_cached_hasher() -> PasswordHasher:
    """Argon2id hasher with production settings (~300ms on a typical server)."""
    return PasswordHasher(
        time_cost=3,
        memory_cost=65536,  # 64MB
        parallelism=4,
        hash_len=32,
        salt_len=16,
        type=Type.ID,
    )


async def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    if not password:
        raise ValueError("Password cannot be empty")

    hasher = get_cached_hasher()
    loop = asyncio.get_running_loop()

    # Run in executor to avoid blocking the event loop
    return await loop.run_in_executor(None, hasher.hash, password)


async def verify_password(password: str, hash: str) -> bool:
    """Verify a password against an Argon2id hash."""
    if not password or not hash:
        return False

    hasher = get_cached_hasher()

    def _verify() -> bool:
        try:
            return hasher.verify(hash, password)
        except (VerifyMismatchError, InvalidHashError):
            return False

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _verify)
