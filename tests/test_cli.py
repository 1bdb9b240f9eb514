from unittest.mock import AsyncMock, MagicMock

import pytest

from app.config import Settings
from app.errors import UpstreamRegistrationError
from cli import build_parser, cli_add_address, cli_register_stream


ADDR = "0x" + "c" * 40


@pytest.fixture
def provider():
    streams = MagicMock()
    streams.create_stream = AsyncMock(return_value="stream-9")
    streams.add_addresses = AsyncMock(return_value=None)
    return streams


@pytest.mark.asyncio
async def test_register_stream_creates_and_adds_monitored_address(provider, monkeypatch):
    monkeypatch.setenv("WEBHOOK_BASE_URL", "https://hooks.example.com")
    monkeypatch.setenv("MONITORED_ADDRESS", ADDR)
    config = Settings()

    stream_id = await cli_register_stream(provider, config)

    assert stream_id == "stream-9"
    kwargs = provider.create_stream.await_args.kwargs
    assert kwargs["webhook_url"] == "https://hooks.example.com/webhook/evm"
    assert kwargs["chain_ids"] == ["0xaa36a7"]
    assert kwargs["include_internal_txs"] is True
    assert ADDR in kwargs["description"]
    provider.add_addresses.assert_awaited_once_with("stream-9", [ADDR])


@pytest.mark.asyncio
async def test_register_stream_requires_webhook_base_url(provider, monkeypatch):
    monkeypatch.delenv("WEBHOOK_BASE_URL", raising=False)
    config = Settings()

    with pytest.raises(UpstreamRegistrationError):
        await cli_register_stream(provider, config)

    provider.create_stream.assert_not_awaited()


@pytest.mark.asyncio
async def test_add_address_validates(provider):
    with pytest.raises(UpstreamRegistrationError):
        await cli_add_address(provider, "stream-9", "0xnot-an-address")

    await cli_add_address(provider, "stream-9", ADDR)
    provider.add_addresses.assert_awaited_once_with("stream-9", [ADDR])


def test_parser_commands():
    parser = build_parser()

    args = parser.parse_args(["add-address", ADDR, "--stream-id", "s1"])

    assert args.command == "add-address"
    assert args.address == ADDR
    assert args.stream_id == "s1"
    assert parser.parse_args(["register-stream"]).command == "register-stream"
