"""Collect the watched addresses that caused a stream event to be reported."""

from __future__ import annotations

from typing import Set

from ..address import normalize_address
from .models import WebhookEvent


def extract_addresses(event: WebhookEvent) -> Set[str]:
    """Normalized ``triggered_by`` addresses across the native transactions.

    An event without native transactions yields an empty set.
    """
    addresses: Set[str] = set()
    for tx in event.txs:
        for address in tx.triggered_by:
            if address.strip():
                addresses.add(normalize_address(address))
    return addresses
