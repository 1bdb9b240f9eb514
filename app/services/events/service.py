"""
Alert Service

Orchestrates the subscribe workflow and webhook processing:
classifier → extractor → dispatcher.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ...errors import (
    MalformedEventError,
    UpstreamRegistrationError,
    ValidationError,
)
from ...providers.base import MailProvider, StreamProvider
from ..address import is_valid_email, is_valid_evm_address, normalize_address
from .classifier import classify_event
from .dispatcher import NotificationDispatcher
from .extractor import extract_addresses
from .models import (
    ConfirmationPolicy,
    Ignored,
    ProcessingOutcome,
    WebhookEvent,
)
from .registry import SubscriptionRegistry
from .rendering import render_subscription_confirmation

logger = logging.getLogger(__name__)


# Singleton instance
_service_instance: Optional["AlertService"] = None


def get_alert_service() -> "AlertService":
    """Get the singleton AlertService instance."""
    global _service_instance
    if _service_instance is None:
        from ...config import settings
        from ...providers.moralis import MoralisStreamsProvider
        from ...providers.sendgrid import SendGridMailProvider

        _service_instance = AlertService(
            streams=MoralisStreamsProvider(
                api_key=settings.moralis_api_key,
                base_url=settings.moralis_streams_base_url,
                timeout_s=settings.request_timeout_seconds,
            ),
            mailer=SendGridMailProvider(
                api_key=settings.sendgrid_api_key,
                from_email=settings.email_from,
                base_url=settings.sendgrid_base_url,
                timeout_s=settings.request_timeout_seconds,
            ),
            stream_id=settings.stream_id,
            policy=settings.confirmation_policy,
            explorer_tx_url=settings.explorer_tx_url,
        )

    return _service_instance


async def shutdown_alert_service() -> None:
    """Close the singleton's provider clients, if it was ever built."""
    global _service_instance
    if _service_instance is not None:
        await _service_instance.close()
        _service_instance = None


class AlertService:
    """
    On-chain activity alerting.

    Owns:
    - The subscription registry
    - Stream registration for new subscribers
    - Classification and fan-out of incoming stream events
    """

    def __init__(
        self,
        streams: StreamProvider,
        mailer: MailProvider,
        stream_id: str = "",
        policy: ConfirmationPolicy = ConfirmationPolicy.CONFIRMED_ONLY,
        registry: Optional[SubscriptionRegistry] = None,
        explorer_tx_url: str = "https://etherscan.io/tx/",
    ):
        self.streams = streams
        self.mailer = mailer
        self.stream_id = stream_id
        self.policy = policy
        self.registry = registry if registry is not None else SubscriptionRegistry()
        self.dispatcher = NotificationDispatcher(
            registry=self.registry,
            mailer=mailer,
            explorer_tx_url=explorer_tx_url,
        )

    # =========================================================================
    # Subscription Management
    # =========================================================================

    async def subscribe(self, address: str, email: str) -> str:
        """
        Watch an address on behalf of a subscriber.

        Adds the address to the stream, stores the subscription and sends a
        confirmation email.

        Returns:
            The normalized address

        Raises:
            ValidationError: address or email is malformed
            UpstreamRegistrationError: the stream provider rejected the address
            DeliveryError: the confirmation email could not be sent
        """
        address = (address or "").strip()
        email = (email or "").strip()

        if not address or not email:
            raise ValidationError("address and email required")
        if not is_valid_evm_address(address):
            raise ValidationError("address must be 0x followed by 40 hex characters")
        if not is_valid_email(email):
            raise ValidationError("email is not a valid address")

        if not self.stream_id:
            raise UpstreamRegistrationError("Stream id not configured")

        await self.streams.add_addresses(self.stream_id, [address])

        normalized = normalize_address(address)
        self.registry.put(normalized, email)
        logger.info(f"Subscribed {email} to {normalized}")

        confirmation = render_subscription_confirmation(address)
        await self.mailer.send(email, confirmation.subject, confirmation.html)

        return normalized

    # =========================================================================
    # Webhook Handling
    # =========================================================================

    async def handle_webhook(self, payload: Any) -> ProcessingOutcome:
        """
        Classify a stream payload and notify interested subscribers.

        Never raises: malformed payloads and delivery failures are logged and
        reported in the returned outcome.
        """
        outcome = ProcessingOutcome()

        if not isinstance(payload, dict):
            logger.warning(f"Ignored webhook with non-object body ({type(payload).__name__})")
            payload = {}

        try:
            classification = classify_event(payload, self.policy)
            outcome.classification = classification

            if isinstance(classification, Ignored):
                logger.info(
                    f"Ignored webhook: {classification.reason.value} "
                    f"(retries={payload.get('retries')}, confirmed={payload.get('confirmed')})"
                )
                return outcome

            event = self._parse_event(payload)

            addresses = extract_addresses(event)
            outcome.addresses = sorted(addresses)
            if not addresses:
                logger.info(f"No interested subscriber for event {event.tag!r}: no triggering addresses")
                return outcome

            outcome.report = await self.dispatcher.dispatch(event, classification.kind, addresses)

        except MalformedEventError as e:
            outcome.error = e.message
            logger.warning(f"Skipped malformed webhook: {e.message}")
        except Exception as e:  # noqa: BLE001
            outcome.error = str(e)
            logger.error(f"Error processing webhook: {e}", exc_info=True)

        return outcome

    def _parse_event(self, payload: Dict[str, Any]) -> WebhookEvent:
        try:
            return WebhookEvent.model_validate(payload)
        except PydanticValidationError as exc:
            raise MalformedEventError(
                f"Payload does not match stream event shape: {exc.error_count()} error(s)",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    # =========================================================================
    # Introspection
    # =========================================================================

    async def health(self) -> Dict[str, Any]:
        return {
            "confirmation_policy": self.policy.value,
            "subscriptions": len(self.registry),
            "stream_configured": bool(self.stream_id),
            "providers": {
                self.streams.name: await self.streams.health_check(),
                self.mailer.name: await self.mailer.health_check(),
            },
        }

    async def close(self):
        """Clean up provider resources."""
        for provider in (self.streams, self.mailer):
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
