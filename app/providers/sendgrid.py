"""SendGrid v3 mail provider"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import DeliveryError
from .base import MailProvider

logger = logging.getLogger(__name__)


class SendGridMailProvider(MailProvider):
    """Send HTML email through the SendGrid v3 API"""

    name = "sendgrid"

    def __init__(
        self,
        api_key: str,
        from_email: str,
        base_url: str = "https://api.sendgrid.com",
        timeout_s: float = 10,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.client = client or httpx.AsyncClient(timeout=timeout_s)

    async def ready(self) -> bool:
        return bool(self.api_key and self.from_email)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "API key or sender not configured"}
        return {"status": "configured"}

    def _build_message(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }

    async def send(self, to: str, subject: str, html: str) -> None:
        if not await self.ready():
            raise DeliveryError("SendGrid is not configured", recipient=to)

        try:
            response = await self.client.post(
                f"{self.base_url}/v3/mail/send",
                json=self._build_message(to, subject, html),
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"SendGrid request failed: {exc}", recipient=to) from exc

        if response.status_code >= 400:
            raise DeliveryError(
                f"SendGrid returned {response.status_code}",
                recipient=to,
                status_code=response.status_code,
                details={"body": response.text[:500]},
            )

        logger.debug(f"Sent '{subject}' to {to}")

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
