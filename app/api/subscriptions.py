"""
Subscription API Endpoints

Let users register an email address for alerts on a watched address.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import ValidationError
from ..services.events import AlertService, get_alert_service

logger = logging.getLogger(__name__)
router = APIRouter()


class SubscribeRequest(BaseModel):
    """Request to receive alerts for an address."""

    address: Optional[str] = None
    email: Optional[str] = None


class SubscribeResponse(BaseModel):
    """Subscribe outcome."""

    success: bool
    message: Optional[str] = None
    address: Optional[str] = None
    error: Optional[str] = None


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    request: SubscribeRequest,
    service: AlertService = Depends(get_alert_service),
):
    """
    Subscribe an email address to activity on an EVM address.

    Adds the address to the stream, stores the subscription and emails a
    confirmation.
    """
    try:
        address = await service.subscribe(request.address or "", request.email or "")
    except ValidationError as e:
        logger.info(f"Rejected subscribe request: {e.message}")
        return JSONResponse(
            status_code=400,
            content=SubscribeResponse(success=False, error=e.message).model_dump(exclude_none=True),
        )
    except Exception as e:  # noqa: BLE001
        logger.error(f"Subscribe error: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=SubscribeResponse(success=False, error="Failed to subscribe").model_dump(exclude_none=True),
        )

    return SubscribeResponse(
        success=True,
        message=f"Subscribed {request.email} to on-chain alerts for {address}",
        address=address,
    )
