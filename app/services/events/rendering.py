"""
Notification Rendering

Pure functions from a stream event to the email document sent to subscribers.
No transport concerns live here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from html import escape
from typing import List, Optional

from ...errors import MalformedEventError
from .models import (
    Erc20Transfer,
    NativeTransaction,
    NftTransfer,
    NotificationDocument,
    NotificationKind,
    WebhookEvent,
)

NATIVE_DECIMALS = 18
MIN_FRACTION_DIGITS = 4

_TABLE_ATTRS = 'border="1" cellpadding="5" cellspacing="0" style="border-collapse:collapse;"'


def format_native_value(raw: str, decimals: int = NATIVE_DECIMALS) -> str:
    """Convert a smallest-unit integer string into display units.

    Keeps every significant digit, groups thousands and always shows at least
    four fractional digits: ``"1500000000000000000"`` → ``"1.5000"``.
    """
    try:
        units = Decimal(int(str(raw).strip()))
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise MalformedEventError(f"Invalid on-chain value: {raw!r}") from exc

    amount = units.scaleb(-decimals)
    whole, _, fraction = f"{amount:,f}".partition(".")
    fraction = fraction.rstrip("0").ljust(MIN_FRACTION_DIGITS, "0")
    return f"{whole}.{fraction}"


def format_block_time(timestamp: str) -> Optional[str]:
    """RFC 1123 style UTC time for a unix timestamp string."""
    if not timestamp:
        return None
    try:
        moment = datetime.fromtimestamp(int(timestamp), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise MalformedEventError(f"Invalid block timestamp: {timestamp!r}") from exc
    return moment.strftime("%a, %d %b %Y %H:%M:%S GMT")


def _tx_link(tx_hash: str, explorer_tx_url: str) -> str:
    safe = escape(tx_hash)
    return f'<a href="{escape(explorer_tx_url)}{safe}" target="_blank">{safe}</a>'


def _cell(value: Optional[str]) -> str:
    return escape(value) if value else "&mdash;"


def _primary_transaction_section(tx: NativeTransaction, explorer_tx_url: str) -> str:
    rows = [
        ("Hash", _tx_link(tx.hash, explorer_tx_url)),
        ("From", _cell(tx.from_address)),
        ("To", _cell(tx.to_address)),
        ("Value", f"{format_native_value(tx.value)} ETH"),
        ("Gas Used", _cell(tx.receipt_gas_used)),
    ]
    body = "".join(f"<tr><th>{label}</th><td>{value}</td></tr>" for label, value in rows)
    return f"<h3>Native Transaction</h3><table {_TABLE_ATTRS}>{body}</table>"


def _erc20_section(transfers: List[Erc20Transfer], explorer_tx_url: str) -> str:
    items = []
    for transfer in transfers:
        decimals = transfer.token_decimals if transfer.token_decimals is not None else NATIVE_DECIMALS
        symbol = escape(transfer.token_symbol) if transfer.token_symbol else "tokens"
        amount = format_native_value(transfer.value, decimals)
        items.append(
            f"<p>{_cell(transfer.from_address)} &rarr; {_cell(transfer.to_address)}, "
            f"{amount} {symbol}<br>{_tx_link(transfer.transaction_hash, explorer_tx_url)}</p>"
        )
    return "<h3>ERC-20 Transfers</h3>" + "".join(items)


def _nft_section(transfers: List[NftTransfer], explorer_tx_url: str) -> str:
    items = []
    for transfer in transfers:
        name = f" ({escape(transfer.token_name)})" if transfer.token_name else ""
        items.append(
            f"<p>{_cell(transfer.from_address)} &rarr; {_cell(transfer.to_address)}, "
            f"TokenID: {escape(transfer.token_id)}{name}"
            f"<br>{_tx_link(transfer.transaction_hash, explorer_tx_url)}</p>"
        )
    return "<h3>NFT Transfers</h3>" + "".join(items)


def render_activity_notification(
    event: WebhookEvent,
    kind: NotificationKind,
    explorer_tx_url: str = "https://etherscan.io/tx/",
) -> NotificationDocument:
    """Render the single document sent to every subscriber of one event."""
    tag = event.tag or "watched address"

    if kind == NotificationKind.FIRST_UNCONFIRMED:
        subject = f"⏳ Pending activity on {tag}"
        heading = "🔔 On-chain Activity Detected (unconfirmed)"
        status = "Seen in the mempool or a recent block; not yet final."
    else:
        subject = f"🔔 Activity on {tag}"
        heading = "🔔 On-chain Activity Detected"
        status = "Confirmed."

    parts = [
        f"<h2>{heading}</h2>",
        f"<p><strong>Address:</strong> {escape(tag)}</p>",
        f"<p><strong>Status:</strong> {status}</p>",
    ]

    if event.block is not None:
        block_time = format_block_time(event.block.timestamp)
        if block_time:
            parts.append(f"<p><strong>Time:</strong> {block_time}</p>")
        if event.block.number:
            parts.append(
                f"<p><strong>Block:</strong> {escape(event.block.number)} "
                f"(<code>{escape(event.block.hash)}</code>)</p>"
            )

    primary = event.primary_transaction
    if primary is not None:
        parts.append(_primary_transaction_section(primary, explorer_tx_url))
    if event.erc20_transfers:
        parts.append(_erc20_section(event.erc20_transfers, explorer_tx_url))
    if event.nft_transfers:
        parts.append(_nft_section(event.nft_transfers, explorer_tx_url))

    return NotificationDocument(subject=subject, html="\n".join(parts))


def render_subscription_confirmation(address: str) -> NotificationDocument:
    safe = escape(address)
    html = (
        "<h2>Subscription Confirmed!</h2>\n"
        f"<p>You will now receive email alerts whenever <strong>{safe}</strong> "
        "does any on-chain activity.</p>\n"
        "<p>Thank you for using our service.</p>"
    )
    return NotificationDocument(subject=f"✅ Subscribed to on-chain alerts for {address}", html=html)
