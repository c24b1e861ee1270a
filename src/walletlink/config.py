"""Adapter configuration using pydantic-settings.

Values are read from ``WALLETLINK_*`` environment variables (or a ``.env``
file). Explicit constructor arguments on the adapter always win.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Adapter settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WALLETLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Application
    # ======================
    app_name: str = Field(default="DApp", description="Name shown to the wallet user")
    app_logo_url: Optional[str] = Field(default=None, description="Logo shown to the wallet user")

    # ======================
    # Relay
    # ======================
    relay_backend: str = Field(default="local", description="Relay backend: local or dry_run")
    link_api_url: str = Field(
        default="https://www.walletlink.org", description="Bridge server used for pairing URLs"
    )
    local_private_keys: str = Field(
        default="", description="Comma-separated hex private keys for the local relay"
    )
    auto_approve_chains: bool = Field(
        default=True, description="Local relay approves wallet_addEthereumChain proposals"
    )
    http_timeout: float = Field(default=30.0, description="Timeout for JSON-RPC HTTP calls")

    # ======================
    # Session
    # ======================
    default_json_rpc_url: str = Field(
        default="", description="JSON-RPC URL used until the wallet reports one"
    )
    storage_scope: str = Field(default="walletlink", description="Prefix for storage keys")

    @property
    def private_keys(self) -> list[str]:
        """Parse configured local relay keys."""
        if not self.local_private_keys:
            return []
        return [k.strip() for k in self.local_private_keys.split(",") if k.strip()]

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "app_name": self.app_name,
            "relay_backend": self.relay_backend,
            "link_api_url": self.link_api_url,
            "default_json_rpc_url": self.default_json_rpc_url,
            "storage_scope": self.storage_scope,
            "local_private_keys": f"({len(self.private_keys)} configured)",
            "auto_approve_chains": self.auto_approve_chains,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
