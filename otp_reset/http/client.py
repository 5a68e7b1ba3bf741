"""
Internal HTTP Client
====================
Async JSON client for internal services with retries on transient failures.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .exceptions import (
    InternalServiceError,
    NotFoundError,
    RequestRejectedError,
    ServiceUnavailableError,
)

# tenacity's before_sleep_log expects a stdlib logger
logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, InternalServiceError) and exc.retryable


class BaseInternalClient:
    """
    Resilient async HTTP client for internal services.

    - Retries GETs on network errors, timeouts and 5xx responses with exponential backoff.
    - Sends writes once.
    - Pools connections through one httpx.AsyncClient.
    - Raises InternalServiceError subclasses instead of httpx errors.
    """

    def __init__(
        self,
        base_url: str,
        service_name: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_multiplier: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_name = service_name
        self.max_attempts = max_attempts
        self.backoff_multiplier = backoff_multiplier

        headers = {
            "User-Agent": f"otp-reset/{service_name}",
            "Accept": "application/json",
        }
        if api_key:
            headers["X-Internal-Secret"] = api_key

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    def _map_exception(self, exc: httpx.HTTPError) -> InternalServiceError:
        service = self.service_name
        if isinstance(exc, httpx.TimeoutException):
            return ServiceUnavailableError("request timed out", service=service)
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            text = exc.response.text
            if status == 404:
                return NotFoundError("resource not found", service=service, status_code=status)
            if status >= 500:
                return ServiceUnavailableError("server error", service=service, status_code=status, details=text)
            return RequestRejectedError("request rejected", service=service, status_code=status, details=text)
        return ServiceUnavailableError(f"transport error: {exc}", service=service)

    async def _send(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise self._map_exception(e) from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error("Invalid JSON from %s %s", self.service_name, path)
            raise InternalServiceError("invalid JSON response", service=self.service_name) from e

    async def _request(
        self,
        method: str,
        path: str,
        retry: bool = False,
        **kwargs,
    ) -> Optional[Dict[str, Any]]:
        if not retry:
            return await self._send(method, path, **kwargs)

        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=10),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, **kwargs)

    async def get(self, path: str, params: Optional[Dict] = None) -> Optional[Dict]:
        return await self._request("GET", path, retry=True, params=params)

    # POST and PATCH are sent exactly once
    async def post(self, path: str, json: Any = None) -> Optional[Dict]:
        return await self._request("POST", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Optional[Dict]:
        return await self._request("PATCH", path, json=json)
