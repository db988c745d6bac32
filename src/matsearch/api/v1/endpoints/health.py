"""Health endpoints — Service liveness and per-provider status."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from matsearch import __version__
from matsearch.adapters.base.adapter import AdapterHealth
from matsearch.api.deps import get_engine
from matsearch.core.engine import MaterialsSearchEngine

router = APIRouter()


class HealthResponse(BaseModel):
    """Service liveness.

    ``status`` is ``degraded`` when no provider adapter is active, since every
    search would then come back empty.
    """

    status: str = Field(description="'healthy' or 'degraded'")
    version: str = Field(description="MatSearch server version")
    service: str = Field(default="matsearch", description="Service name")
    active_adapters: list[str] = Field(description="Names of the provider adapters taking part in searches")


class AdapterHealthResponse(BaseModel):
    adapters: dict[str, AdapterHealth] = Field(description="Health status keyed by adapter name")


@router.get("/health", response_model=HealthResponse, summary="Service Health")
async def health_check(engine: MaterialsSearchEngine = Depends(get_engine)) -> HealthResponse:
    active = engine.adapter_registry.active_adapters
    return HealthResponse(
        status="healthy" if active else "degraded",
        version=__version__,
        active_adapters=active,
    )


@router.get(
    "/health/adapters",
    response_model=AdapterHealthResponse,
    summary="Provider Health",
    description=(
        "Run the health check of every active provider adapter. The local adapter reports "
        "`unhealthy` for the rest of the process lifetime once its dataset fails to load; "
        "the remote adapter reports `disabled` when no API key is configured."
    ),
)
async def adapter_health(engine: MaterialsSearchEngine = Depends(get_engine)) -> AdapterHealthResponse:
    return AdapterHealthResponse(adapters=await engine.adapter_registry.health_check_all())
