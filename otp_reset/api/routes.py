"""
OTP HTTP Routes
===============
Thin adapter from the JSON endpoints to the lifecycle manager and the
password reset service.

Every response uses the {"success": ..., "message": ...} envelope.
Client-correctable errors answer 400 with the error's own message.
Everything else is logged and answered 500 with a generic message.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
import structlog

from otp_reset.errors import OtpServiceError
from otp_reset.metrics import CONTENT_TYPE_LATEST, get_metrics_text
from otp_reset.otp import OtpLifecycleManager, PasswordResetService

from .schemas import (
    MessageResponse,
    ResetPasswordRequest,
    SendOtpRequest,
    VerifyOtpRequest,
    VerifyResponse,
    as_text,
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["OTP"])

SEND_FAILED = "Failed to send OTP"
VERIFY_FAILED = "Verification failed"
RESET_FAILED = "Password reset failed"

_ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    500: {"model": MessageResponse},
}


def get_otp_manager(request: Request) -> OtpLifecycleManager:
    return request.app.state.otp_manager


def get_reset_service(request: Request) -> PasswordResetService:
    return request.app.state.reset_service


def error_response(exc: Exception, failure_message: str) -> JSONResponse:
    """Translate an exception raised by a service call into the error envelope."""
    if isinstance(exc, OtpServiceError) and exc.status_code < 500:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    if isinstance(exc, OtpServiceError):
        logger.error(failure_message, code=exc.code, details=exc.details)
    else:
        logger.error(failure_message, error=str(exc), exc_info=exc)

    return JSONResponse(
        status_code=500,
        content={"success": False, "message": failure_message},
    )


@router.get("/", response_class=PlainTextResponse)
async def wake():
    """Keep-alive ping for hosts that idle the process."""
    return "Server awake"


@router.post("/send-otp", response_model=MessageResponse, responses=_ERROR_RESPONSES)
async def send_otp(
    data: SendOtpRequest,
    manager: OtpLifecycleManager = Depends(get_otp_manager),
):
    try:
        await manager.request_otp(as_text(data.phone))
    except Exception as e:
        return error_response(e, SEND_FAILED)
    return MessageResponse(success=True, message="OTP sent successfully")


@router.post("/verify-otp", response_model=VerifyResponse, responses=_ERROR_RESPONSES)
async def verify_otp(
    data: VerifyOtpRequest,
    manager: OtpLifecycleManager = Depends(get_otp_manager),
):
    """Check a code without consuming it."""
    try:
        verified = await manager.verify_otp(as_text(data.phone), as_text(data.otp))
    except Exception as e:
        return error_response(e, VERIFY_FAILED)
    return VerifyResponse(success=True, verified=verified)


@router.post("/reset-password", response_model=MessageResponse, responses=_ERROR_RESPONSES)
async def reset_password(
    data: ResetPasswordRequest,
    service: PasswordResetService = Depends(get_reset_service),
):
    """Consume the code and set a new password on the derived account."""
    try:
        await service.reset_password(
            as_text(data.phone),
            as_text(data.otp),
            as_text(data.new_password),
        )
    except Exception as e:
        return error_response(e, RESET_FAILED)
    return MessageResponse(success=True, message="Password updated")


@router.get("/metrics", include_in_schema=False)
async def metrics():
    return Response(content=get_metrics_text(), media_type=CONTENT_TYPE_LATEST)
