"""
OTP Reset Service Application
=============================
FastAPI app factory wiring settings, the OTP store, the SMS provider and
the identity store into the lifecycle manager and HTTP routes.

Run with:
    uvicorn --factory otp_reset.app:create_app
"""

import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from otp_reset.api import create_health_router, router, setup_cors
from otp_reset.config import Settings
from otp_reset.identity import HttpIdentityStore, IdentityStore, InMemoryIdentityStore
from otp_reset.logging import RequestLoggingMiddleware, setup_logging
from otp_reset.otp import (
    OtpConfig,
    OtpLifecycleManager,
    PasswordResetService,
    SmsOtpDelivery,
)
from otp_reset.otp.manager import VERIFY_REQUIRED
from otp_reset.otp.reset import RESET_REQUIRED
from otp_reset.providers import BaseProviderAdapter, Fast2SMSAdapter, TwilioAdapter
from otp_reset.store import InMemoryOtpStore, OtpStore, RedisOtpStore
from otp_reset.vault import load_provider_secrets

logger = structlog.get_logger(__name__)

# Message for a body that fails schema validation, per endpoint
REQUIRED_MESSAGES = {
    "/send-otp": "phone is required",
    "/verify-otp": VERIFY_REQUIRED,
    "/reset-password": RESET_REQUIRED,
}


def build_store(settings: Settings) -> OtpStore:
    if settings.store_backend == "memory":
        return InMemoryOtpStore()
    if settings.store_backend == "redis":
        return RedisOtpStore.from_url(
            settings.redis_url,
            retention_seconds=settings.retention_seconds,
        )
    raise ValueError(f"Unknown OTP store backend: {settings.store_backend}")


def build_provider(settings: Settings) -> BaseProviderAdapter:
    timeout = settings.delivery_timeout_seconds
    if settings.sms_provider == "fast2sms":
        return Fast2SMSAdapter({"api_key": settings.fast2sms_api_key, "timeout": timeout})
    if settings.sms_provider == "twilio":
        return TwilioAdapter({
            "account_sid": settings.twilio_account_sid,
            "auth_token": settings.twilio_auth_token,
            "from_number": settings.twilio_phone_number,
            "timeout": timeout,
        })
    raise ValueError(f"Unknown SMS provider: {settings.sms_provider}")


def build_identity_store(settings: Settings) -> IdentityStore:
    if settings.identity_backend == "memory":
        return InMemoryIdentityStore()
    if settings.identity_backend == "http":
        return HttpIdentityStore(
            base_url=settings.identity_service_url,
            api_key=settings.identity_service_key or None,
        )
    raise ValueError(f"Unknown identity backend: {settings.identity_backend}")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same 400 envelope as missing fields."""
    message = REQUIRED_MESSAGES.get(request.url.path, "Invalid request body")
    logger.info("Rejected request body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"success": False, "message": message})


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[OtpStore] = None,
    provider: Optional[BaseProviderAdapter] = None,
    identity_store: Optional[IdentityStore] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Build the OTP reset service.

    Args:
        settings: Service settings (defaults to the environment)
        store: OTP store override
        provider: SMS provider override
        identity_store: Identity store override
        clock: Epoch-seconds clock for OTP expiry

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.service_name, level=settings.log_level, json_output=settings.log_json)

    if provider is None:
        settings = load_provider_secrets(settings)
        provider = build_provider(settings)
    if store is None:
        store = build_store(settings)
    if identity_store is None:
        identity_store = build_identity_store(settings)

    otp_config = OtpConfig.from_settings(settings)
    delivery = SmsOtpDelivery(
        provider,
        country_code=settings.sms_country_code,
        ttl_seconds=otp_config.ttl_seconds,
    )
    manager = OtpLifecycleManager(store, delivery, config=otp_config, clock=clock)
    reset_service = PasswordResetService(
        manager,
        identity_store,
        email_domain=settings.identity_email_domain,
        country_code=settings.sms_country_code,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.initialize()
        await provider.initialize()
        await identity_store.initialize()
        logger.info(
            "OTP service started",
            store=store.name,
            provider=provider.name,
            identity=identity_store.name,
        )
        try:
            yield
        finally:
            await identity_store.close()
            await provider.close()
            await store.close()
            logger.info("OTP service stopped")

    app = FastAPI(
        title="OTP Reset Service",
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.otp_manager = manager
    app.state.reset_service = reset_service

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    setup_cors(app, settings.cors_origins)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(router)
    app.include_router(
        create_health_router(
            settings.service_name,
            settings.version,
            critical={"otp_store": store.health_check},
            optional={
                "sms_provider": provider.health_check,
                "identity_store": identity_store.health_check,
            },
        )
    )

    return app
