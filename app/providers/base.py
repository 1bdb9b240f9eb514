from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence


class Provider(ABC):
    """Base provider interface"""
    
    name: str
    timeout_s: float = 10
    
    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is configured to serve requests"""
        pass
    
    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class StreamProvider(Provider):
    """Provider that pushes on-chain activity for watched addresses to a webhook"""
    
    @abstractmethod
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
        """Register a stream and return its opaque id"""
        pass
    
    @abstractmethod
    async def add_addresses(self, stream_id: str, addresses: List[str]) -> None:
        """Add watched addresses to an existing stream"""
        pass


class MailProvider(Provider):
    """Provider that delivers notification emails"""
    
    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one message; raise DeliveryError on failure"""
        pass
