"""Application configuration management using Pydantic's BaseSettings."""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing at startup."""


class Settings(BaseSettings):
    """Defines all configuration settings for the API, loaded from .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Identity provider (Google OAuth) and session signing
    auth_google_id: Optional[str] = None
    auth_google_secret: Optional[str] = None
    auth_secret: Optional[str] = None

    # Upstream model (OpenAI-compatible chat completions)
    nous_api_base_url: str = "https://inference-api.nousresearch.com/v1"
    nous_api_key: Optional[str] = None
    hermes_model: str = "Hermes-4-405B"
    buddhabot_mode: str = "panel"

    # Assistant Cloud (conversation history)
    assistant_api_key: Optional[str] = None
    assistant_api_base_url: str = "https://backend.assistant-api.com"

    # App settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    build_phase: bool = False

    # Feature flags
    enable_test_account: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def test_account_enabled(self) -> bool:
        """The fixed-credential sign-in is never available in production."""
        return self.enable_test_account and not self.is_production

    def missing_required(self) -> List[str]:
        """Names of the required environment variables that are unset."""
        required = {
            "AUTH_GOOGLE_ID": self.auth_google_id,
            "AUTH_GOOGLE_SECRET": self.auth_google_secret,
            "AUTH_SECRET": self.auth_secret,
        }
        return [name for name, value in required.items() if not value]

    def validate_required(self) -> "Settings":
        """Fail fast on missing auth configuration, except during a build."""
        if self.build_phase:
            return self

        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                f"Missing required auth environment variables: {', '.join(missing)}\n"
                "Please check your .env file and ensure all variables are set."
            )
        return self


def load_settings(**overrides) -> Settings:
    """Loads settings from the environment and validates them once."""
    return Settings(**overrides).validate_required()
