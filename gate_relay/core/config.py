"""
Configuration Management

Centralized configuration using Pydantic Settings.
All settings loaded from environment variables with sensible defaults.
Settings are read once at startup and not reloaded while serving.
"""
import logging
from typing import Optional, List
from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict

from gate_relay.core.errors import ConfigurationError


DEVELOPMENT = "DEVELOPMENT"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ignore extra environment variables that aren't defined in the model
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================================
    # Gate Configuration
    # ============================================================
    gate_hmac_key: Optional[str] = Field(None, description="Shared HMAC secret for signing gate commands")
    gate_url: Optional[str] = Field(None, description="Gate controller endpoint URL")
    gate_command_window_seconds: int = Field(
        60,
        gt=0,
        description="Seconds until a relayed gate command expires"
    )
    gate_dispatch_timeout_seconds: float = Field(
        5.0,
        gt=0,
        description="Timeout for the outbound request to the gate controller"
    )

    # ============================================================
    # Deployment Configuration
    # ============================================================
    environment: str = Field(
        "PRODUCTION",
        description="Deployment mode. DEVELOPMENT unlocks key registry administration"
    )

    # ============================================================
    # Database Configuration
    # ============================================================
    database_url: str = Field("sqlite:///./public_keys.db", description="Public key registry database URL")

    # ============================================================
    # API Configuration
    # ============================================================
    api_port: int = Field(8000, description="API server port")

    # ============================================================
    # Logging Configuration
    # ============================================================
    log_level: str = Field("INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string"
    )

    @property
    def is_development(self) -> bool:
        """Whether registry administration routes are reachable."""
        return self.environment.upper() == DEVELOPMENT

    def missing_gate_config(self) -> List[str]:
        """Names of required gate settings that are unset or blank."""
        missing = []
        if not self.gate_hmac_key:
            missing.append("GATE_HMAC_KEY")
        if not self.gate_url:
            missing.append("GATE_URL")
        return missing

    def require_gate_config(self) -> None:
        """
        Fail closed when gate signing cannot be done safely.

        Raises:
            ConfigurationError: If the shared secret or gate URL is missing
        """
        missing = self.missing_gate_config()
        if missing:
            raise ConfigurationError(
                f"Gate relay not configured: missing {', '.join(missing)}"
            )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings from environment (useful for testing)."""
    global _settings
    _settings = Settings()
    return _settings


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
