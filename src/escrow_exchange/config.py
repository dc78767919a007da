"""Application configuration via pydantic-settings.

Reads from .env file or environment variables. All settings are validated
at startup — if a setting is malformed, the app fails fast with a clear
error message.

Usage:
    from escrow_exchange.config import get_settings
    settings = get_settings()
    print(settings.verifying_contract)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Escrow Exchange."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = True
    app_log_level: str = "DEBUG"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # --- Signing domain ---
    # Every signature is bound to these four values. Changing any of them
    # invalidates all previously issued authorizations.
    domain_name: str = "Marketplace"
    domain_version: str = "1"
    chain_id: int = 31337
    verifying_contract: str = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

    # --- Authorization ---
    authorization_scheme: Literal["full", "minimal"] = "full"
    require_authorization: bool = True
    enforce_unique_nonces: bool = False

    # --- Settlement ---
    # Zero address stands for the chain's native currency.
    settlement_asset: str = "0x0000000000000000000000000000000000000000"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton of the application settings."""
    return Settings()
