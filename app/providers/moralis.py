"""
Moralis Streams provider

Creates EVM streams and manages their watched addresses.
Docs: https://docs.moralis.com/streams-api/evm
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..errors import UpstreamRegistrationError
from .base import StreamProvider

logger = logging.getLogger(__name__)


class MoralisStreamsProvider(StreamProvider):
    """Moralis Streams API client"""

    name = "moralis"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.moralis-streams.com",
        timeout_s: float = 10,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.client = client or httpx.AsyncClient(timeout=timeout_s)

    def _build_headers(self) -> Dict[str, str]:
        return {
            "X-API-Key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "API key not configured"}
        return {"status": "configured"}

    async def _request(self, method: str, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise UpstreamRegistrationError("Moralis API key not configured")

        url = f"{self.base_url}{path}"
        try:
            response = await self.client.request(
                method,
                url,
                json=payload,
                headers=self._build_headers(),
            )
        except httpx.HTTPError as exc:
            raise UpstreamRegistrationError(
                f"Moralis request {method} {path} failed: {exc}",
                details={"path": path},
            ) from exc

        if response.status_code >= 400:
            raise UpstreamRegistrationError(
                f"Moralis returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
                details={"path": path, "body": response.text[:500]},
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}

    async def create_stream(
        self,
        webhook_url: str,
        description: str,
        tag: str,
        chain_ids: Sequence[str],
        include_native_txs: bool = True,
        include_internal_txs: bool = True,
        include_contract_logs: bool = True,
    ) -> str:
        """Create an EVM stream and return its id."""
        payload = {
            "webhookUrl": webhook_url,
            "description": description,
            "tag": tag,
            "chainIds": list(chain_ids),
            "includeNativeTxs": include_native_txs,
            "includeInternalTxs": include_internal_txs,
            "includeContractLogs": include_contract_logs,
        }
        data = await self._request("PUT", "/streams/evm", payload)
        stream_id = data.get("id")
        if not stream_id:
            raise UpstreamRegistrationError("Moralis stream response did not include an id", details=data)

        logger.info(f"Created Moralis stream {stream_id} for {webhook_url}")
        return stream_id

    async def add_addresses(self, stream_id: str, addresses: List[str]) -> None:
        """Add addresses to an existing stream."""
        if not stream_id:
            raise UpstreamRegistrationError("Stream id not configured")

        await self._request(
            "POST",
            f"/streams/evm/{stream_id}/address",
            {"address": addresses},
        )
        logger.info(f"Added {len(addresses)} address(es) to stream {stream_id}")

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
