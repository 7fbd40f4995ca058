"""Provider status API endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from roadledger_gateway.core.pipeline import ExtractionPipeline
from roadledger_gateway.models import ProviderId
from roadledger_gateway.utils import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/providers", tags=["providers"])


def _pipeline(request: Request) -> ExtractionPipeline:
    return request.app.state.pipeline


@router.get("")
async def list_providers(request: Request) -> dict[str, list[dict[str, Any]]]:
    """List configured providers with their circuit state."""
    pipeline = _pipeline(request)
    providers = []
    for config in pipeline.registry.list_providers():
        health = pipeline.tracker.snapshot(ProviderId(config["id"]))
        providers.append({**config, "health": health})
    return {"providers": providers}


@router.post("/{provider_id}/reset")
async def reset_provider(provider_id: str, request: Request) -> dict[str, Any]:
    """Close a provider's circuit."""
    pipeline = _pipeline(request)
    try:
        pid = ProviderId(provider_id)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown provider: {provider_id}")

    if not pipeline.registry.is_configured(pid):
        raise HTTPException(status_code=404, detail=f"Provider not configured: {provider_id}")

    pipeline.tracker.reset(pid)
    logger.info("provider.circuit_reset", provider_id=pid.value)
    return {"provider": pid.value, "status": "reset", "health": pipeline.tracker.snapshot(pid)}
