"""Configuration management for the Admin Agent service."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_REPO_ROOT = Path(__file__).resolve().parents[2]
_AGENT_DIR = Path(__file__).resolve().parents[1]
# Repo root .env wins; the package directory and CWD are fallbacks.
_ENV_FILE_CANDIDATES: tuple[str, ...] = (
    str(_REPO_ROOT / ".env"),
    str(_AGENT_DIR / ".env"),
    ".env",
)


class AgentSettings(BaseSettings):
    """Centralised configuration derived from environment variables."""

    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = Field(
        str(_REPO_ROOT / "log" / "agent.log"),
        description="Log file path; set to an empty string to log to stdout only",
    )

    agent_host: str = Field("0.0.0.0", description="FastAPI bind host")
    agent_port: int = Field(8001, description="FastAPI bind port")
    http_timeout_seconds: float = Field(15.0, gt=0, description="Outbound HTTP timeout")

    auth0_domain: str | None = Field(None, description="Auth0 tenant domain, e.g. acme.eu.auth0.com")
    auth0_client_id: str | None = Field(None, description="Machine-to-machine client id")
    auth0_client_secret: SecretStr | None = Field(None, description="Machine-to-machine client secret")
    token_expiry_margin_seconds: int = Field(
        300, ge=0, description="Seconds subtracted from the token lifetime before it is refreshed"
    )

    gemini_api_key: SecretStr | None = Field(None, description="Gemini API key")
    gemini_api_base: AnyHttpUrl = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        description="Gemini REST endpoint",
    )
    gemini_model: str = Field("gemini-2.5-flash", description="Gemini model used for both phases")

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_CANDIDATES,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def credential_presence(self) -> dict[str, str]:
        """Report which external credentials are configured, without exposing them."""

        fields = {
            "auth0_domain": self.auth0_domain,
            "auth0_client_id": self.auth0_client_id,
            "auth0_client_secret": self.auth0_client_secret,
            "gemini_api_key": self.gemini_api_key,
        }
        return {name: "set" if value else "missing" for name, value in fields.items()}


@lru_cache
def get_settings() -> AgentSettings:
    """Return a cached AgentSettings instance."""

    return AgentSettings()


def resolved_env_file() -> str | None:
    """Return the first readable .env file from the candidate list."""

    for candidate in _ENV_FILE_CANDIDATES:
        path = Path(candidate).expanduser()
        if path.is_file():
            return str(path)
    return None


def env_file_candidates() -> tuple[str, ...]:
    """Expose configured env file search order for diagnostics."""

    return _ENV_FILE_CANDIDATES
