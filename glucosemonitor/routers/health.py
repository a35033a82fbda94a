"""Health check endpoints for container orchestration."""

from typing import Any

from fastapi import APIRouter, Depends

from glucosemonitor.services.cob_settings import ConfigStore, get_config_store

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    store: ConfigStore = Depends(get_config_store),
) -> dict[str, Any]:
    """
    Health check endpoint.

    The service has no database or upstream dependency, so it is healthy
    whenever it can answer. Reports whether custom engine settings are in
    effect.
    """
    return {
        "status": "healthy",
        "custom_settings": store.is_customized(),
    }


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """
    Kubernetes liveness probe.

    Returns success if the application process is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe() -> dict[str, Any]:
    """
    Kubernetes readiness probe.

    Ready as soon as the app is importable: the engine needs no warm-up.
    """
    return {"status": "ready"}
