"""
Event Monitoring Models

Data structures for provider webhook payloads, classification outcomes and
notification dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Array fields of a stream payload; any non-empty one makes the event substantive
PAYLOAD_ARRAY_FIELDS = ("txs", "txsInternal", "logs", "erc20Transfers", "nftTransfers")


class ConfirmationPolicy(str, Enum):
    """Which provider confirmation states trigger a notification."""

    CONFIRMED_ONLY = "confirmed_only"
    LOW_LATENCY = "low_latency"


class NotificationKind(str, Enum):
    """Notifiable states of a stream event."""

    FIRST_UNCONFIRMED = "first_unconfirmed"
    CONFIRMED = "confirmed"


class IgnoreReason(str, Enum):
    """Why an event produced no notification."""

    EMPTY_PING = "empty-ping"
    UNCONFIRMED = "unconfirmed"
    DUPLICATE_RETRY = "duplicate-retry"


@dataclass(frozen=True)
class Ignored:
    reason: IgnoreReason


@dataclass(frozen=True)
class Notifiable:
    kind: NotificationKind


Classification = Union[Ignored, Notifiable]


# =============================================================================
# Stream payload
# =============================================================================


class _PayloadModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class BlockInfo(_PayloadModel):
    """Block the event was observed in."""

    number: str = ""
    hash: str = ""
    timestamp: str = ""

    @field_validator("number", "hash", "timestamp", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)


class NativeTransaction(_PayloadModel):
    """Native (ETH) transaction reported by the stream."""

    hash: str = ""
    from_address: Optional[str] = Field(default=None, alias="fromAddress")
    to_address: Optional[str] = Field(default=None, alias="toAddress")
    value: str = "0"
    receipt_gas_used: Optional[str] = Field(default=None, alias="receiptGasUsed")
    triggered_by: List[str] = Field(default_factory=list)

    @field_validator("value", mode="before")
    @classmethod
    def _value_to_str(cls, value: Any) -> str:
        return "0" if value is None else str(value)

    @field_validator("receipt_gas_used", mode="before")
    @classmethod
    def _gas_to_str(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)

    @field_validator("triggered_by", mode="before")
    @classmethod
    def _triggered_by_list(cls, value: Any) -> Any:
        # Absent or null means no triggering address; unreadable entries are dropped
        if value is None:
            return []
        if isinstance(value, list):
            return [address for address in value if isinstance(address, str)]
        return value


class Erc20Transfer(_PayloadModel):
    """ERC-20 token transfer reported by the stream."""

    transaction_hash: str = Field(default="", alias="transactionHash")
    from_address: Optional[str] = Field(default=None, alias="from")
    to_address: Optional[str] = Field(default=None, alias="to")
    value: str = "0"
    token_symbol: Optional[str] = Field(default=None, alias="tokenSymbol")
    token_decimals: Optional[int] = Field(default=None, alias="tokenDecimals")

    @field_validator("value", mode="before")
    @classmethod
    def _value_to_str(cls, value: Any) -> str:
        return "0" if value is None else str(value)

    @field_validator("token_decimals", mode="before")
    @classmethod
    def _blank_decimals(cls, value: Any) -> Any:
        return None if value in ("", None) else value


class NftTransfer(_PayloadModel):
    """ERC-721 / ERC-1155 transfer reported by the stream."""

    transaction_hash: str = Field(default="", alias="transactionHash")
    from_address: Optional[str] = Field(default=None, alias="from")
    to_address: Optional[str] = Field(default=None, alias="to")
    token_id: str = Field(default="", alias="tokenId")
    token_name: Optional[str] = Field(default=None, alias="tokenName")

    @field_validator("token_id", mode="before")
    @classmethod
    def _token_id_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)


class WebhookEvent(_PayloadModel):
    """Typed view of a stream webhook payload.

    Only built once the raw payload has been classified as notifiable; the
    classifier works on the raw mapping.
    """

    confirmed: bool = False
    retries: int = 0
    tag: str = ""
    chain_id: Optional[str] = Field(default=None, alias="chainId")
    stream_id: Optional[str] = Field(default=None, alias="streamId")
    block: Optional[BlockInfo] = None

    txs: List[NativeTransaction] = Field(default_factory=list)
    txs_internal: List[Dict[str, Any]] = Field(default_factory=list, alias="txsInternal")
    logs: List[Dict[str, Any]] = Field(default_factory=list)
    erc20_transfers: List[Erc20Transfer] = Field(default_factory=list, alias="erc20Transfers")
    nft_transfers: List[NftTransfer] = Field(default_factory=list, alias="nftTransfers")

    @field_validator(
        "txs", "txs_internal", "logs", "erc20_transfers", "nft_transfers", mode="before"
    )
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("confirmed", mode="before")
    @classmethod
    def _strict_confirmed(cls, value: Any) -> bool:
        return value is True

    @field_validator("retries", mode="before")
    @classmethod
    def _lenient_retries(cls, value: Any) -> int:
        # Retry state is settled by the classifier; only keep a readable count here
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    @field_validator("tag", mode="before")
    @classmethod
    def _tag_to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def primary_transaction(self) -> Optional[NativeTransaction]:
        return self.txs[0] if self.txs else None


# =============================================================================
# Dispatch results
# =============================================================================


@dataclass(frozen=True)
class NotificationDocument:
    """Rendered notification, identical for every recipient of one event."""

    subject: str
    html: str


@dataclass
class DispatchReport:
    """Outcome of fanning one event out to its subscribers."""

    event_tag: str
    kind: Optional[NotificationKind] = None
    recipients: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.recipients)

    @property
    def delivered(self) -> List[str]:
        return [r for r in self.recipients if r not in self.failed]


@dataclass
class ProcessingOutcome:
    """What happened to one inbound webhook payload."""

    classification: Optional[Classification] = None
    addresses: List[str] = field(default_factory=list)
    report: Optional[DispatchReport] = None
    error: Optional[str] = None

    @property
    def notified(self) -> bool:
        return self.report is not None and bool(self.report.delivered)
