"""Application configuration (settings and environment).

Process-level settings only: where the server config file and the vault key
live, debug mode, outbound timeouts. Backends and entry types are described
in the YAML server config (see staticimp.infrastructure.config.loader).
Uses pydantic-settings with .env support and the STATICIMP_ env prefix.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env."""

    # App
    app_name: str = "staticimp"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server config (YAML): backends, entry types, listen address
    config_path: str = "staticimp.yml"

    # Secret vault: PEM private key from a file or directly from the environment.
    # Leave both empty to run without a vault (encrypted config values are then rejected).
    vault_private_key_path: str = ""
    vault_private_key: SecretStr | None = None
    vault_private_key_password: SecretStr | None = None

    # Outbound calls to repository backends (per-backend timeout_seconds overrides)
    backend_timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="STATICIMP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_vault_source(self) -> "Settings":
        """Reject ambiguous vault configuration (both a key path and an inline key)."""
        has_inline = (
            self.vault_private_key is not None
            and bool(self.vault_private_key.get_secret_value())
        )
        if has_inline and self.vault_private_key_path:
            raise ValueError(
                "Set only one of STATICIMP_VAULT_PRIVATE_KEY_PATH or "
                "STATICIMP_VAULT_PRIVATE_KEY, not both."
            )
        if self.backend_timeout_seconds <= 0:
            raise ValueError("backend_timeout_seconds must be positive")
        return self

    @property
    def vault_configured(self) -> bool:
        """True when a private key source is configured."""
        if self.vault_private_key_path:
            return True
        return self.vault_private_key is not None and bool(
            self.vault_private_key.get_secret_value()
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    In tests, call get_settings.cache_clear() before overriding env vars so
    the next get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
