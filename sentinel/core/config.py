"""Core configuration for the Sentinel engine."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SENTINEL_",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "Sentinel Engine"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # ── Ledger RPC nodes ─────────────────────────────────────────────────
    rpc_mainnet: str = "https://mainnet.movementnetwork.xyz/v1"
    rpc_testnet: str = "https://testnet.movementnetwork.xyz/v1"
    node_api_key: str = ""  # sent as X-Api-Key when set
    node_timeout_seconds: float = 30.0

    # ── Simulation ───────────────────────────────────────────────────────
    default_max_gas: int = 100_000
    gas_unit_price: int = 100
    expiration_window_seconds: int = 600


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
