from app.config import Settings
from app.services.events import ConfirmationPolicy


def test_confirmation_policy_defaults_to_confirmed_only(monkeypatch):
    """Deployments notify on final events unless told otherwise."""

    monkeypatch.delenv("CONFIRMATION_POLICY", raising=False)

    settings = Settings()

    assert settings.confirmation_policy == ConfirmationPolicy.CONFIRMED_ONLY


def test_confirmation_policy_from_env(monkeypatch):
    monkeypatch.setenv("CONFIRMATION_POLICY", "low_latency")

    settings = Settings()

    assert settings.confirmation_policy == ConfirmationPolicy.LOW_LATENCY


def test_email_from_alias(monkeypatch):
    """Sender identity also loads from the MAIL_FROM alias."""

    monkeypatch.delenv("EMAIL_FROM", raising=False)
    monkeypatch.setenv("MAIL_FROM", "alerts@example.com")

    settings = Settings()

    assert settings.email_from == "alerts@example.com"


def test_webhook_url_strips_trailing_slash(monkeypatch):
    monkeypatch.setenv("WEBHOOK_BASE_URL", "https://hooks.example.com/")

    settings = Settings()

    assert settings.webhook_url == "https://hooks.example.com/webhook/evm"


def test_stream_chain_ids_from_json_env(monkeypatch):
    monkeypatch.setenv("STREAM_CHAIN_IDS", '["0x1", "0x89"]')

    settings = Settings()

    assert settings.stream_chain_ids == ["0x1", "0x89"]
