"""
Configuration management for the Tip Jar mini-app.

Loads settings from .env via pydantic-settings.

Notes:
    - validate_production_settings() enforces strict CORS in production
    - TIP_ROUTING selects how the client routes tips (hybrid / link_only / wallet_eth)
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

from domain.enums import TipRouting

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Payment Links ───────────────────────────────────────────────
    payment_base_url: str = "https://pay.send.it"

    # ── Client ──────────────────────────────────────────────────────
    tip_api_base_url: str = "http://localhost:5000"
    tip_routing: TipRouting = TipRouting.HYBRID
    request_timeout_seconds: float = 15.0

    # ── Wallet / Chains ─────────────────────────────────────────────
    app_name: str = "Tip Jar"
    app_description: str = "Send crypto tips to your favorite creators"
    app_url: str = "https://tipjar.app"
    eth_rpc_url: str = "https://eth.llamarpc.com"
    base_rpc_url: str = "https://mainnet.base.org"
    walletconnect_project_id: str = ""

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 5000
    frontend_dir: str = "client/dist"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:5000,http://127.0.0.1:5000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. Wildcard CORS is refused in production
        and only warned about elsewhere.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.payment_base_url.startswith("https://"):
                raise ValueError("PAYMENT_BASE_URL must use https in production.")
            logger.info("Production settings validated")
        else:
            warnings = []
            if "*" in self.cors_origins:
                warnings.append("CORS_ORIGINS contains '*' (open access)")
            if not self.walletconnect_project_id:
                warnings.append("WALLETCONNECT_PROJECT_ID is not set (wallet connections may not work)")
            for w in warnings:
                logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
