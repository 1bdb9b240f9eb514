"""Helpers for normalizing and validating subscriber input."""

from __future__ import annotations

import re
from functools import lru_cache

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$")


def normalize_address(address: str) -> str:
    """Collapse an address into its case-insensitive lookup key."""

    return address.strip().lower()


@lru_cache(maxsize=1024)
def is_valid_evm_address(address: str) -> bool:
    if not address:
        return False
    return bool(_EVM_ADDRESS_RE.match(address.strip()))


def is_valid_email(email: str) -> bool:
    if not email or len(email) > 254:
        return False
    return bool(_EMAIL_RE.match(email.strip()))
