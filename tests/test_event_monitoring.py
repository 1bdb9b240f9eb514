"""
Tests for Event Monitoring

Tests payload classification, address extraction, the subscription registry and
the typed payload model.
"""

import threading

import pytest

from app.services.events.classifier import classify_event, is_substantive
from app.services.events.extractor import extract_addresses
from app.services.events.models import (
    ConfirmationPolicy,
    Ignored,
    IgnoreReason,
    Notifiable,
    NotificationKind,
    PAYLOAD_ARRAY_FIELDS,
    WebhookEvent,
)
from app.services.events.registry import SubscriptionRegistry


ADDR_A = "0x" + "a" * 40
ADDR_B = "0x" + "b" * 40
ADDR_C = "0x" + "c" * 40

BOTH_POLICIES = [ConfirmationPolicy.CONFIRMED_ONLY, ConfirmationPolicy.LOW_LATENCY]


def make_payload(**overrides):
    payload = {
        "confirmed": True,
        "retries": 0,
        "tag": "full_address_activity",
        "chainId": "0xaa36a7",
        "block": {"number": "123", "hash": "0xblock", "timestamp": "1700000000"},
        "txs": [
            {
                "hash": "0xtx1",
                "fromAddress": ADDR_A,
                "toAddress": ADDR_B,
                "value": "1000000000000000000",
                "receiptGasUsed": "21000",
                "triggered_by": [ADDR_A],
            }
        ],
        "txsInternal": [],
        "logs": [],
        "erc20Transfers": [],
        "nftTransfers": [],
    }
    payload.update(overrides)
    return payload


def empty_payload(**overrides):
    payload = {key: [] for key in PAYLOAD_ARRAY_FIELDS}
    payload.update(overrides)
    return payload


# =============================================================================
# Classifier Tests
# =============================================================================


class TestClassifier:
    """Test event classification."""

    @pytest.mark.parametrize("policy", BOTH_POLICIES)
    @pytest.mark.parametrize(
        "extra",
        [
            {},
            {"confirmed": True, "retries": 0},
            {"confirmed": False, "retries": 0},
            {"confirmed": True, "retries": 3, "tag": "x"},
        ],
    )
    def test_empty_ping_regardless_of_other_fields(self, policy, extra):
        result = classify_event(empty_payload(**extra), policy)
        assert result == Ignored(IgnoreReason.EMPTY_PING)

    def test_missing_arrays_are_empty(self):
        result = classify_event({"confirmed": True}, ConfirmationPolicy.CONFIRMED_ONLY)
        assert result == Ignored(IgnoreReason.EMPTY_PING)

    def test_non_list_arrays_are_empty(self):
        payload = {"confirmed": True, "txs": "0xabc", "logs": {"a": 1}}
        assert is_substantive(payload) is False

    @pytest.mark.parametrize("policy", BOTH_POLICIES)
    @pytest.mark.parametrize("field", PAYLOAD_ARRAY_FIELDS)
    def test_confirmed_is_notifiable_under_both_policies(self, policy, field):
        payload = empty_payload(confirmed=True, retries=2)
        payload[field] = [{"any": "thing"}]
        assert classify_event(payload, policy) == Notifiable(NotificationKind.CONFIRMED)

    def test_confirmed_only_ignores_unconfirmed(self):
        result = classify_event(make_payload(confirmed=False), ConfirmationPolicy.CONFIRMED_ONLY)
        assert result == Ignored(IgnoreReason.UNCONFIRMED)

    def test_low_latency_first_unconfirmed(self):
        result = classify_event(
            make_payload(confirmed=False, retries=0), ConfirmationPolicy.LOW_LATENCY
        )
        assert result == Notifiable(NotificationKind.FIRST_UNCONFIRMED)

    def test_low_latency_retry_is_duplicate(self):
        result = classify_event(
            make_payload(confirmed=False, retries=1), ConfirmationPolicy.LOW_LATENCY
        )
        assert result == Ignored(IgnoreReason.DUPLICATE_RETRY)

    def test_low_latency_missing_retries_counts_as_first(self):
        payload = make_payload(confirmed=False)
        del payload["retries"]
        result = classify_event(payload, ConfirmationPolicy.LOW_LATENCY)
        assert result == Notifiable(NotificationKind.FIRST_UNCONFIRMED)

    def test_low_latency_unreadable_retries_is_duplicate(self):
        result = classify_event(
            make_payload(confirmed=False, retries="many"), ConfirmationPolicy.LOW_LATENCY
        )
        assert result == Ignored(IgnoreReason.DUPLICATE_RETRY)

    def test_truthy_non_bool_confirmed_is_not_confirmed(self):
        result = classify_event(
            make_payload(confirmed="true"), ConfirmationPolicy.CONFIRMED_ONLY
        )
        assert result == Ignored(IgnoreReason.UNCONFIRMED)

    def test_reason_values(self):
        assert IgnoreReason.EMPTY_PING == "empty-ping"
        assert IgnoreReason.UNCONFIRMED == "unconfirmed"
        assert IgnoreReason.DUPLICATE_RETRY == "duplicate-retry"


# =============================================================================
# Extractor Tests
# =============================================================================


class TestExtractor:
    """Test triggering address extraction."""

    def test_collects_normalized_addresses_across_transactions(self):
        payload = make_payload(
            txs=[
                {"hash": "0x1", "triggered_by": [ADDR_A.upper().replace("0X", "0x"), ADDR_B]},
                {"hash": "0x2", "triggered_by": [ADDR_A, " " + ADDR_C + " "]},
            ]
        )
        event = WebhookEvent.model_validate(payload)

        assert extract_addresses(event) == {ADDR_A, ADDR_B, ADDR_C}

    def test_absent_triggered_by_is_empty(self):
        event = WebhookEvent.model_validate(
            make_payload(txs=[{"hash": "0x1"}, {"hash": "0x2", "triggered_by": None}])
        )
        assert extract_addresses(event) == set()

    def test_non_string_entries_are_skipped(self):
        event = WebhookEvent.model_validate(
            make_payload(txs=[{"hash": "0x1", "triggered_by": [None, 42, ADDR_A, {"a": 1}]}])
        )
        assert extract_addresses(event) == {ADDR_A}

    def test_no_native_transactions_yields_empty_set(self):
        event = WebhookEvent.model_validate(
            make_payload(txs=[], logs=[{"address": ADDR_A}])
        )
        assert extract_addresses(event) == set()


# =============================================================================
# Registry Tests
# =============================================================================


class TestSubscriptionRegistry:
    """Test the in-memory subscription registry."""

    def test_put_then_lookup(self):
        registry = SubscriptionRegistry()
        registry.put(ADDR_A, "user@example.com")
        assert registry.lookup(ADDR_A) == "user@example.com"

    def test_lookup_is_case_insensitive(self):
        registry = SubscriptionRegistry()
        registry.put("0x" + "A" * 40, "user@example.com")
        assert registry.lookup("0x" + "a" * 40) == "user@example.com"
        assert registry.lookup("  0X" + "A" * 40 + " ") == "user@example.com"

    def test_last_write_wins(self):
        registry = SubscriptionRegistry()
        registry.put(ADDR_A, "first@example.com")
        registry.put(ADDR_A.upper(), "second@example.com")
        assert registry.lookup(ADDR_A) == "second@example.com"
        assert len(registry) == 1

    def test_unknown_address(self):
        registry = SubscriptionRegistry()
        assert registry.lookup(ADDR_A) is None
        assert ADDR_A not in registry

    def test_resolve_deduplicates_contacts(self):
        registry = SubscriptionRegistry()
        registry.put(ADDR_A, "shared@example.com")
        registry.put(ADDR_B, "shared@example.com")
        registry.put(ADDR_C, "other@example.com")

        contacts = registry.resolve([ADDR_A, ADDR_B, ADDR_C, ADDR_A, "0x" + "d" * 40])

        assert contacts == ["shared@example.com", "other@example.com"]

    def test_instances_are_isolated(self):
        first = SubscriptionRegistry()
        second = SubscriptionRegistry()
        first.put(ADDR_A, "user@example.com")
        assert second.lookup(ADDR_A) is None

    def test_concurrent_puts(self):
        registry = SubscriptionRegistry()

        def writer(offset):
            for i in range(200):
                registry.put(f"0x{offset:02x}{i:038x}", f"user{offset}-{i}@example.com")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 8 * 200
        assert registry.lookup(f"0x03{5:038x}") == "user3-5@example.com"


# =============================================================================
# Payload Model Tests
# =============================================================================


class TestWebhookEvent:
    """Test the typed stream payload."""

    def test_parses_provider_field_names(self):
        event = WebhookEvent.model_validate(
            make_payload(
                erc20Transfers=[
                    {
                        "transactionHash": "0xt",
                        "from": ADDR_A,
                        "to": ADDR_B,
                        "value": 5,
                        "tokenSymbol": "USDC",
                        "tokenDecimals": "6",
                    }
                ],
                nftTransfers=[{"transactionHash": "0xn", "from": ADDR_A, "to": ADDR_B, "tokenId": 7}],
            )
        )

        assert event.confirmed is True
        assert event.chain_id == "0xaa36a7"
        assert event.block.number == "123"
        assert event.primary_transaction.from_address == ADDR_A
        assert event.primary_transaction.receipt_gas_used == "21000"
        assert event.erc20_transfers[0].value == "5"
        assert event.erc20_transfers[0].token_decimals == 6
        assert event.nft_transfers[0].token_id == "7"

    def test_null_arrays_become_empty(self):
        event = WebhookEvent.model_validate(make_payload(logs=None, nftTransfers=None))
        assert event.logs == []
        assert event.nft_transfers == []

    def test_no_primary_transaction_without_txs(self):
        event = WebhookEvent.model_validate(make_payload(txs=[]))
        assert event.primary_transaction is None
