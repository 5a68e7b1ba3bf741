"""
Internal HTTP
=============
"""

from .client import BaseInternalClient
from .exceptions import (
    InternalServiceError,
    ServiceUnavailableError,
    NotFoundError,
    RequestRejectedError,
)

__all__ = [
    "BaseInternalClient",
    "InternalServiceError",
    "ServiceUnavailableError",
    "NotFoundError",
    "RequestRejectedError",
]
