"""API v1 Router — Search and health endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from matsearch.api.v1.endpoints import health, search

router = APIRouter(tags=["v1"])
for endpoint_module in (search, health):
    router.include_router(endpoint_module.router)
