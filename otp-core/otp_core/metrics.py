"""
Prometheus Metrics
===================
OTP issuance and verification metrics.
"""

from prometheus_client import CollectorRegistry, Counter, generate_latest, CONTENT_TYPE_LATEST


class VerificationOutcome:
    """Label values for ``otp_verifications_total``."""
    VERIFIED = "verified"
    MISMATCH = "mismatch"
    EXPIRED = "expired"
    LOCKED_OUT = "locked_out"
    MISSING = "missing"
    CORRUPT = "corrupt"
    CONTENDED = "contended"


# Custom registry so embedding services keep their default registry clean
OTP_REGISTRY = CollectorRegistry()

OTP_ISSUED_TOTAL = Counter(
    name="otp_issued_total",
    documentation="Total number of OTP codes issued",
    labelnames=["charset"],
    registry=OTP_REGISTRY,
)

OTP_VERIFICATIONS_TOTAL = Counter(
    name="otp_verifications_total",
    documentation="Total number of OTP verification attempts by outcome",
    labelnames=["outcome"],
    registry=OTP_REGISTRY,
)


def record_issued(charset: str) -> None:
    OTP_ISSUED_TOTAL.labels(charset=charset).inc()


def record_verification(outcome: str) -> None:
    OTP_VERIFICATIONS_TOTAL.labels(outcome=outcome).inc()


def get_metrics_text() -> bytes:
    """Render the OTP registry in Prometheus text format."""
    return generate_latest(OTP_REGISTRY)


__all__ = [
    "VerificationOutcome",
    "OTP_REGISTRY",
    "OTP_ISSUED_TOTAL",
    "OTP_VERIFICATIONS_TOTAL",
    "CONTENT_TYPE_LATEST",
    "record_issued",
    "record_verification",
    "get_metrics_text",
]
