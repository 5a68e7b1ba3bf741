"""
OTP API
=======
FastAPI routers for the OTP endpoints and health probes.
"""

from .health import HealthStatus, ComponentHealth, HealthResponse, create_health_router
from .middleware import setup_cors
from .routes import router, error_response, get_otp_manager, get_reset_service
from .schemas import (
    SendOtpRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
    MessageResponse,
    VerifyResponse,
)

__all__ = [
    # Routes
    "router",
    "error_response",
    "get_otp_manager",
    "get_reset_service",
    # Schemas
    "SendOtpRequest",
    "VerifyOtpRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "VerifyResponse",
    # Health
    "HealthStatus",
    "ComponentHealth",
    "HealthResponse",
    "create_health_router",
    # Middleware
    "setup_cors",
]
