"""
Event Classifier

Decides whether a raw stream payload should produce a notification. Works on the
untyped mapping so that provider test pings and partial payloads never reach
code that dereferences transaction fields.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .models import (
    PAYLOAD_ARRAY_FIELDS,
    Classification,
    ConfirmationPolicy,
    Ignored,
    IgnoreReason,
    Notifiable,
    NotificationKind,
)

logger = logging.getLogger(__name__)


def is_substantive(payload: Mapping[str, Any]) -> bool:
    """True if at least one payload array carries data."""
    return any(
        isinstance(payload.get(key), list) and len(payload[key]) > 0
        for key in PAYLOAD_ARRAY_FIELDS
    )


def _retry_count(payload: Mapping[str, Any]) -> int:
    raw = payload.get("retries")
    if raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        # Unreadable retry counter; treat as a redelivery rather than a first sighting
        return 1


def classify_event(payload: Mapping[str, Any], policy: ConfirmationPolicy) -> Classification:
    """
    Classify a stream payload under the configured confirmation policy.

    Args:
        payload: Raw webhook body as decoded JSON
        policy: Fixed deployment policy

    Returns:
        ``Ignored(reason)`` or ``Notifiable(kind)``
    """
    if not is_substantive(payload):
        return Ignored(IgnoreReason.EMPTY_PING)

    confirmed = payload.get("confirmed") is True

    if confirmed:
        return Notifiable(NotificationKind.CONFIRMED)

    if policy == ConfirmationPolicy.CONFIRMED_ONLY:
        return Ignored(IgnoreReason.UNCONFIRMED)

    if _retry_count(payload) == 0:
        return Notifiable(NotificationKind.FIRST_UNCONFIRMED)

    return Ignored(IgnoreReason.DUPLICATE_RETRY)
