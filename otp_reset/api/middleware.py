"""
CORS Middleware Helper
======================
"""

from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

logger = structlog.get_logger(__name__)


def setup_cors(app: FastAPI, origins: Optional[List[str]] = None) -> None:
    """
    Configure CORS for the browser and mobile clients calling the OTP endpoints.

    Args:
        app: FastAPI application instance
        origins: Allowed origins; "*" allows any
    """
    origins = origins or ["*"]

    if "*" in origins:
        logger.warning("CORS wildcard enabled", origins=origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    logger.info("CORS configured", origins_count=len(origins))
