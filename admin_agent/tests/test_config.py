import os

import pytest

from admin_agent.core.config import AgentSettings


@pytest.fixture(autouse=True)
def _restore_env():
    original = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original)


def test_agent_settings_reads_env(monkeypatch):
    monkeypatch.setenv("AUTH0_DOMAIN", "acme.eu.auth0.com")
    monkeypatch.setenv("AUTH0_CLIENT_ID", "m2m-client")
    monkeypatch.setenv("AUTH0_CLIENT_SECRET", "m2m-secret")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")

    settings = AgentSettings(_env_file=None)

    assert settings.auth0_domain == "acme.eu.auth0.com"
    assert settings.auth0_client_id == "m2m-client"
    assert settings.auth0_client_secret.get_secret_value() == "m2m-secret"
    assert settings.gemini_api_key.get_secret_value() == "gemini-key"
    assert settings.token_expiry_margin_seconds == 300


def test_missing_credentials_are_reported_not_rejected(monkeypatch):
    for name in ("AUTH0_DOMAIN", "AUTH0_CLIENT_ID", "AUTH0_CLIENT_SECRET", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)

    settings = AgentSettings(_env_file=None)

    assert settings.credential_presence() == {
        "auth0_domain": "missing",
        "auth0_client_id": "missing",
        "auth0_client_secret": "missing",
        "gemini_api_key": "missing",
    }


def test_secrets_are_masked_in_repr(monkeypatch):
    monkeypatch.setenv("AUTH0_CLIENT_SECRET", "m2m-secret")

    settings = AgentSettings(_env_file=None)

    assert "m2m-secret" not in repr(settings)
