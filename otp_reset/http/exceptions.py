"""
Internal Service Call Errors
============================
Failures of calls made through BaseInternalClient. Only retryable errors
are retried by the client.
"""

from typing import Any, Optional


class InternalServiceError(Exception):
    """A call to an internal HTTP service failed."""

    retryable = False

    def __init__(
        self,
        message: str,
        service: str = "unknown",
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message
        self.service = service
        self.status_code = status_code
        self.details = details
        suffix = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"{service}: {message}{suffix}")


class ServiceUnavailableError(InternalServiceError):
    """Unreachable, timed out or answered 5xx."""
    retryable = True


class NotFoundError(InternalServiceError):
    """The requested resource does not exist (404)."""


class RequestRejectedError(InternalServiceError):
    """The service refused the request: bad credentials or payload (4xx)."""
