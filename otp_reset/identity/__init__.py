"""
Identity Store
==============
Account directories that receive password resets.
"""

from .base import Account, AccountNotFound, IdentityStore
from .memory import InMemoryIdentityStore
from .http import HttpIdentityStore

__all__ = [
    "Account",
    "AccountNotFound",
    "IdentityStore",
    "InMemoryIdentityStore",
    "HttpIdentityStore",
]
