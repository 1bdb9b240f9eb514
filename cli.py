#!/usr/bin/env python3
"""Administrative CLI for setting up the upstream activity stream"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from app.config import Settings, settings
from app.errors import UpstreamRegistrationError
from app.logging_config import setup_logging
from app.providers.base import StreamProvider
from app.providers.moralis import MoralisStreamsProvider
from app.services.address import is_valid_evm_address

logger = logging.getLogger("cli")


async def cli_register_stream(provider: StreamProvider, config: Settings) -> str:
    """Create a full-capture stream and add the monitored address to it"""
    if not config.webhook_base_url:
        raise UpstreamRegistrationError("WEBHOOK_BASE_URL is not configured")

    stream_id = await provider.create_stream(
        webhook_url=config.webhook_url,
        description=f"Full activity for {config.monitored_address or 'subscribed addresses'}",
        tag=config.stream_tag,
        chain_ids=config.stream_chain_ids,
        include_native_txs=True,
        include_internal_txs=True,
        include_contract_logs=True,
    )
    print(f"✅ Stream created: {stream_id}")

    if config.monitored_address:
        await provider.add_addresses(stream_id, [config.monitored_address])
        print(f"✅ Address added: {config.monitored_address}")

    return stream_id


async def cli_add_address(provider: StreamProvider, stream_id: str, address: str) -> None:
    """Add one address to an existing stream"""
    if not is_valid_evm_address(address):
        raise UpstreamRegistrationError(f"Not an EVM address: {address}")

    await provider.add_addresses(stream_id, [address])
    print(f"✅ Address added to {stream_id}: {address}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="On-chain Alerts admin CLI")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("register-stream", help="Create the activity stream and add MONITORED_ADDRESS")

    add_parser = subparsers.add_parser("add-address", help="Add an address to STREAM_ID")
    add_parser.add_argument("address", help="EVM address to watch")
    add_parser.add_argument("--stream-id", help="Stream id (default: STREAM_ID)")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging()
    provider = MoralisStreamsProvider(
        api_key=settings.moralis_api_key,
        base_url=settings.moralis_streams_base_url,
        timeout_s=settings.request_timeout_seconds,
    )

    try:
        if args.command == "register-stream":
            await cli_register_stream(provider, settings)
        elif args.command == "add-address":
            await cli_add_address(provider, args.stream_id or settings.stream_id, args.address)
    except UpstreamRegistrationError as e:
        logger.error(f"❌ Failed to set up stream: {e.message}")
        return 1
    finally:
        await provider.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
