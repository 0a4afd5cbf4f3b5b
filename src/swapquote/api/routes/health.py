"""Health check endpoints."""

from fastapi import APIRouter, Depends

from swapquote import __version__
from swapquote.config import Settings
from swapquote.rfqt import RegistryGate
from swapquote.web.deps import get_app_settings, get_orchestrator, get_registry_gate
from swapquote.web.services.orchestrator import QuoteOrchestrator

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "swapquote"}


@router.get("/health/detailed")
async def detailed_health(
    settings: Settings = Depends(get_app_settings),
    orchestrator: QuoteOrchestrator = Depends(get_orchestrator),
    gate: RegistryGate = Depends(get_registry_gate),
):
    """Health check with the active engine and redacted configuration."""
    return {
        "status": "healthy",
        "service": "swapquote",
        "version": __version__,
        "engine": type(orchestrator.engine).__name__,
        "chain_id": orchestrator.chain_id,
        "tokens": len(orchestrator.list_tokens().records),
        "registry_fetches": sum(gate.counter.snapshot().values()),
        "config": settings.get_safe_dict(),
    }
