"""
OTP Health Check Module
=======================
Reports backend connectivity and hash-secret mode for the OTP store.
"""

import time
from typing import Dict, Optional
from pydantic import BaseModel
from enum import Enum
import structlog

from otp_core.otp.exceptions import BackendUnavailableError

logger = structlog.get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    status: str
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: HealthStatus
    service: str
    version: str
    components: Dict[str, ComponentHealth]
    timestamp: float


async def check_backend(backend) -> ComponentHealth:
    """Check OTP backend connectivity and latency."""
    try:
        start = time.time()
        await backend.ping()
        latency = (time.time() - start) * 1000
        return ComponentHealth(status="connected", latency_ms=round(latency, 2))
    except BackendUnavailableError as e:
        logger.error("OTP backend health check failed", backend=backend.name, error=str(e))
        return ComponentHealth(status="error", error=str(e))


def check_hash_secret(store) -> ComponentHealth:
    """Report whether codes are hashed with a configured or an ephemeral secret."""
    if store.is_degraded:
        return ComponentHealth(
            status="ephemeral",
            error="OTP hash secret not configured; codes do not survive restarts",
        )
    return ComponentHealth(status="configured")


async def check_otp_health(
    store,
    service_name: str = "otp-core",
    version: Optional[str] = None,
) -> HealthResponse:
    """
    Build a health report for an OTP store.

    Unhealthy when the backend is unreachable, degraded when running on an
    ephemeral hash secret.
    """
    if version is None:
        from otp_core import __version__ as version

    components = {
        "backend": await check_backend(store.backend),
        "hash_secret": check_hash_secret(store),
    }

    if components["backend"].status == "error":
        overall_status = HealthStatus.UNHEALTHY
    elif components["hash_secret"].status == "ephemeral":
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return HealthResponse(
        status=overall_status,
        service=service_name,
        version=version,
        components=components,
        timestamp=time.time(),
    )
