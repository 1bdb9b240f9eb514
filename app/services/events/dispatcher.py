"""
Notification Dispatcher

Fans a notifiable event out to every distinct subscriber of its addresses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from ...providers.base import MailProvider
from .models import DispatchReport, NotificationDocument, NotificationKind, WebhookEvent
from .registry import SubscriptionRegistry
from .rendering import render_activity_notification

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Resolve recipients and deliver one rendered document to each.

    Deliveries for one event run concurrently and are awaited together. A failed
    send is recorded in the report and logged; it never affects the other
    recipients and is never retried.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        mailer: MailProvider,
        explorer_tx_url: str = "https://etherscan.io/tx/",
    ):
        self.registry = registry
        self.mailer = mailer
        self.explorer_tx_url = explorer_tx_url

    async def dispatch(
        self,
        event: WebhookEvent,
        kind: NotificationKind,
        addresses: Iterable[str],
    ) -> DispatchReport:
        report = DispatchReport(event_tag=event.tag, kind=kind)

        report.recipients = self.registry.resolve(addresses)
        if not report.recipients:
            logger.info(f"No interested subscriber for event {event.tag!r}, skipping notification")
            return report

        document = render_activity_notification(event, kind, self.explorer_tx_url)

        results = await asyncio.gather(
            *(self._deliver(recipient, document) for recipient in report.recipients),
            return_exceptions=True,
        )

        for recipient, error in zip(report.recipients, results):
            if error is not None:
                report.failed[recipient] = str(error)
                logger.error(
                    f"Failed to notify {recipient} for event {event.tag!r}: {error}",
                    exc_info=error,
                )

        logger.info(
            f"Dispatched {kind.value} event {event.tag!r}: "
            f"{len(report.delivered)}/{report.attempted} delivered"
        )
        return report

    async def _deliver(self, recipient: str, document: NotificationDocument) -> Optional[Exception]:
        try:
            await self.mailer.send(recipient, document.subject, document.html)
        except Exception as exc:  # noqa: BLE001
            return exc
        return None
