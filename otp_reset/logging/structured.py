"""
Structured Logging
==================
structlog configuration and request logging for the OTP service.

Usage:
    from otp_reset.logging import setup_logging, RequestLoggingMiddleware

    setup_logging(service_name="otp-reset")
    app.add_middleware(RequestLoggingMiddleware)
"""

import logging
import sys
import time
import uuid
from contextvars import ContextVar

import structlog

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
service_name_var: ContextVar[str] = ContextVar("service_name", default="unknown")


def _add_service(logger, method_name, event_dict):
    event_dict.setdefault("service", service_name_var.get())
    request_id = request_id_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Name of the service (e.g., "otp-reset")
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines (production) instead of console output
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger(__name__).info(
        "Logging configured", service=service_name, level=level.upper()
    )


def mask_phone(phone_key: str) -> str:
    """Mask all but the last four digits of a phone key for logs."""
    if not phone_key:
        return ""
    return "*" * max(len(phone_key) - 4, 0) + phone_key[-4:]


class RequestLoggingMiddleware:
    """ASGI middleware logging each HTTP request with a short request ID."""

    def __init__(self, app):
        self.app = app
        self.logger = structlog.get_logger("http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        req_id = str(uuid.uuid4())[:8]
        token = request_id_var.set(req_id)

        method = scope.get("method", "")
        path = scope.get("path", "")
        start_time = time.time()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", req_id.encode()))
                message["headers"] = headers
            await send(message)

        self.logger.info("Request started", method=method, path=path)
        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            self.logger.exception("Request crashed", method=method, path=path)
            raise
        finally:
            duration_ms = int((time.time() - start_time) * 1000)
            log = self.logger.info if status_code < 500 else self.logger.error
            log(
                "Request finished",
                method=method,
                path=path,
                status=status_code,
                duration_ms=duration_ms,
            )
            request_id_var.reset(token)
