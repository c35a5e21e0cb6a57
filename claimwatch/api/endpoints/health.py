"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: ServiceContainer = Depends(get_service_container)) -> Dict[str, Any]:
    """Check service health and whether AI enrichment is active.

    Returns:
        Status, version and AI provider availability
    """
    provider = container.ai_provider
    return {
        "status": "healthy",
        "version": "0.1.0",
        "aiProvider": {
            "name": provider.provider_name if provider else None,
            "available": bool(provider and provider.is_available),
            "mode": "ai" if provider else "heuristic",
        },
        "pendingTasks": container.tasks.pending_count,
    }
