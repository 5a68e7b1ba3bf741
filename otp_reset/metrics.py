"""
Prometheus Metrics
==================
Counters for OTP issuance, verification and password resets.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    CONTENT_TYPE_LATEST,
    generate_latest,
)

OTP_REGISTRY = CollectorRegistry()

OTP_REQUESTS_TOTAL = Counter(
    name="otp_requests_total",
    documentation="OTP send requests by outcome",
    labelnames=["outcome"],
    registry=OTP_REGISTRY,
)

OTP_VERIFICATIONS_TOTAL = Counter(
    name="otp_verifications_total",
    documentation="OTP verification attempts by operation and outcome",
    labelnames=["operation", "outcome"],
    registry=OTP_REGISTRY,
)

PASSWORD_RESETS_TOTAL = Counter(
    name="password_resets_total",
    documentation="Password reset identity mutations by outcome",
    labelnames=["outcome"],
    registry=OTP_REGISTRY,
)


def record_request(outcome: str) -> None:
    OTP_REQUESTS_TOTAL.labels(outcome=outcome).inc()


def record_verification(operation: str, outcome: str) -> None:
    OTP_VERIFICATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()


def record_reset(outcome: str) -> None:
    PASSWORD_RESETS_TOTAL.labels(outcome=outcome).inc()


def get_metrics_text() -> bytes:
    """Prometheus exposition of the OTP registry."""
    return generate_latest(OTP_REGISTRY)


__all__ = [
    "OTP_REGISTRY",
    "CONTENT_TYPE_LATEST",
    "record_request",
    "record_verification",
    "record_reset",
    "get_metrics_text",
]
