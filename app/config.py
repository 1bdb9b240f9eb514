from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .services.events.models import ConfirmationPolicy


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=3000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")

    # Moralis Streams
    moralis_api_key: str = Field(default="", description="Moralis API key")
    moralis_streams_base_url: str = Field(
        default="https://api.moralis-streams.com",
        description="Base URL for the Moralis Streams API",
    )
    stream_id: str = Field(default="", description="Stream that subscribed addresses are added to")
    stream_chain_ids: List[str] = Field(
        default_factory=lambda: ["0xaa36a7"],
        description="Hex chain ids captured by a newly registered stream",
    )
    stream_tag: str = Field(default="full_address_activity", description="Tag attached to new streams")
    webhook_base_url: str = Field(default="", description="Public base URL the provider posts webhooks to")
    monitored_address: str = Field(default="", description="Address added when a stream is first registered")

    # SendGrid
    sendgrid_api_key: str = Field(default="", description="SendGrid API key")
    sendgrid_base_url: str = Field(default="https://api.sendgrid.com", description="SendGrid API base URL")
    email_from: str = Field(
        default="",
        description="Sender identity for outgoing notifications",
        validation_alias=AliasChoices("email_from", "EMAIL_FROM", "mail_from", "MAIL_FROM"),
    )

    # Alerting
    confirmation_policy: ConfirmationPolicy = Field(
        default=ConfirmationPolicy.CONFIRMED_ONLY,
        description="Which provider confirmation states trigger a notification",
    )
    explorer_tx_url: str = Field(
        default="https://etherscan.io/tx/",
        description="Prefix used to link transaction hashes in notifications",
    )

    # Outbound HTTP
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for provider calls")

    @property
    def has_moralis_key(self) -> bool:
        return bool(self.moralis_api_key)

    @property
    def has_sendgrid_key(self) -> bool:
        return bool(self.sendgrid_api_key)

    @property
    def webhook_url(self) -> str:
        """Full callback URL registered with the stream provider."""
        return f"{self.webhook_base_url.rstrip('/')}/webhook/evm"


# Global settings instance
settings = Settings()
