from fastapi import APIRouter, Depends
from typing import Dict, Any

from ..services.events import AlertService, get_alert_service

router = APIRouter()


@router.get("/healthz")
async def health_check(service: AlertService = Depends(get_alert_service)) -> Dict[str, Any]:
    """Health check endpoint that reports provider configuration"""

    details = await service.health()
    provider_status = details["providers"]

    # Count configured providers
    configured_providers = sum(
        1 for status in provider_status.values()
        if status["status"] == "configured"
    )

    return {
        "status": "healthy" if configured_providers == len(provider_status) else "degraded",
        "configured_providers": configured_providers,
        "total_providers": len(provider_status),
        **details,
    }
