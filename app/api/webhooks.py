"""
Webhook API Endpoints

Receive stream events from the blockchain data provider (Moralis).
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import BaseModel

from ..services.events import AlertService, get_alert_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhook")


class WebhookAck(BaseModel):
    """Acknowledgement returned to the provider before processing."""

    success: bool = True


async def _read_payload(request: Request) -> Any:
    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        logger.warning(f"Webhook body is not valid JSON ({len(body)} bytes)")
        return {}


async def _process_in_background(service: AlertService, payload: Any) -> None:
    try:
        await service.handle_webhook(payload)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Unhandled error in webhook processing: {e}", exc_info=True)


@router.post("/evm", response_model=WebhookAck)
async def evm_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    service: AlertService = Depends(get_alert_service),
):
    """
    Receive Moralis stream events (test pings and real activity).

    The provider is acknowledged immediately; classification and notification run
    after the response has been sent so slow deliveries never trigger the
    provider's retry policy.
    """
    payload = await _read_payload(request)
    background_tasks.add_task(_process_in_background, service, payload)
    return WebhookAck()
