"""
config.py — pydantic-settings Settings class.

All environment variables for the Jeffy platform are declared here.
Both the API and the ops CLI import `settings` from this module.

Usage:
    from jeffy_shared.config import settings
    print(settings.supabase_url)
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_dotenv() -> Path | None:
    """Walk up from CWD to find the nearest .env file."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / ".env"
        if candidate.is_file():
            return candidate
    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_find_dotenv() or ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Supabase
    # -------------------------------------------------------------------------
    supabase_url: str = Field(default="http://localhost:54321")
    supabase_anon_key: str = Field(default="")
    supabase_service_key: str = Field(default="")
    supabase_jwt_secret: str = Field(default="change-me-in-production")
    storage_bucket_products: str = Field(default="product-images")

    # -------------------------------------------------------------------------
    # API server
    # -------------------------------------------------------------------------
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    cors_origins: str = Field(default="http://localhost:3000")
    site_url: str = Field(default="http://localhost:3000")
    environment: Literal["development", "staging", "production"] = Field(default="development")

    # Rate limits (requests per minute per role)
    rate_limit_anonymous: int = Field(default=60)
    rate_limit_customer: int = Field(default=300)
    rate_limit_staff: int = Field(default=1200)

    # -------------------------------------------------------------------------
    # Google Maps
    # -------------------------------------------------------------------------
    google_maps_api_key: str = Field(default="")
    google_maps_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api"
    )

    # -------------------------------------------------------------------------
    # Business defaults (percentages are 0-100)
    # -------------------------------------------------------------------------
    currency: str = Field(default="ZAR")
    default_import_vat_rate: float = Field(default=15.0)
    default_sales_vat_rate: float = Field(default=15.0)
    default_corporate_tax_rate: float = Field(default=27.0)
    default_profit_margin: float = Field(default=30.0)
    default_reorder_point: int = Field(default=10)
    default_reorder_quantity: int = Field(default=50)

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")

    # -------------------------------------------------------------------------
    # Derived / computed
    # -------------------------------------------------------------------------
    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def maps_enabled(self) -> bool:
        return bool(self.google_maps_api_key)

    @field_validator("supabase_url", "site_url", "google_maps_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Module-level singleton — import this everywhere
# ---------------------------------------------------------------------------
settings = Settings()
