# app/api/v1/routes/health.py
#
# Description:
# Health endpoint reporting the state of each dependency of the search service.
# The service is "degraded" when the engine is down but the relational store
# can still serve fallback searches.

import time
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from app.api.dependencies import get_container
from infrastructure.container import DIContainer

router = APIRouter(tags=["health"])

# Startup time for uptime calculation
SERVICE_START_TIME = time.time()


class HealthStatus(str, Enum):
    """Health check status"""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status for a single component"""
    status: HealthStatus
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    message: str = Field(description="Status message or error details")
    details: Dict[str, Any] = Field(default_factory=dict, description="Additional diagnostic info")

    model_config = ConfigDict(use_enum_values=True)


class AggregatedHealth(BaseModel):
    """Aggregated health status for the entire service"""
    status: HealthStatus
    components: Dict[str, ComponentHealth]
    uptime_seconds: Optional[float] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(use_enum_values=True)


def aggregate_status(database_ok: bool, engine_ok: bool) -> HealthStatus:
    if database_ok and engine_ok:
        return HealthStatus.HEALTHY
    if database_ok:
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


@router.get("/health", response_model=AggregatedHealth)
async def health(container: DIContainer = Depends(get_container)):
    """
    Check the relational store and the search engine.

    Returns:
        AggregatedHealth: overall status plus one entry per component.
    """
    probes = await container.health()
    components = {}
    for name, probe in probes.items():
        details = {key: value for key, value in probe.items() if key not in ("healthy", "message", "latency_ms")}
        components[name] = ComponentHealth(
            status=HealthStatus.HEALTHY if probe["healthy"] else HealthStatus.UNHEALTHY,
            latency_ms=probe.get("latency_ms"),
            message=str(probe["message"]),
            details=details,
        )

    return AggregatedHealth(
        status=aggregate_status(probes["database"]["healthy"], probes["opensearch"]["healthy"]),
        components=components,
        uptime_seconds=time.time() - SERVICE_START_TIME,
    )
