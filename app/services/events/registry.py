"""
Subscription Registry

In-memory map from watched address to subscriber contact. Process lifetime
only; one contact per address, last write wins.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional

from ..address import normalize_address


class SubscriptionRegistry:
    """Thread-safe address → contact mapping with case-insensitive keys."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._contacts: Dict[str, str] = {}

    def put(self, address: str, contact: str) -> None:
        key = normalize_address(address)
        with self._lock:
            self._contacts[key] = contact

    def lookup(self, address: str) -> Optional[str]:
        key = normalize_address(address)
        with self._lock:
            return self._contacts.get(key)

    def resolve(self, addresses: Iterable[str]) -> List[str]:
        """Distinct contacts for the given addresses, in first-seen order."""
        contacts: List[str] = []
        with self._lock:
            for address in addresses:
                contact = self._contacts.get(normalize_address(address))
                if contact is not None and contact not in contacts:
                    contacts.append(contact)
        return contacts

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        return self.lookup(address) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._contacts)
