"""
LifeStream client settings.

Every value can be overridden by an environment variable of the same
name or a line in ``.env``.  Credentials are ``SecretStr`` so they never
appear in a repr or a log line.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, SecretStr, model_validator


class AppConfig(BaseSettings):
    """Endpoints, credentials and tunables for one client process."""

    # --- Remote API ---
    API_BASE_URL: str = "http://localhost:3000"
    HTTP_TIMEOUT_S: float = Field(default=10.0, gt=0)

    # --- Identity provider (Supabase Auth) ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")
    OAUTH_PROVIDER: str = "google"
    OAUTH_REDIRECT_URL: str = "http://localhost:5173/auth/callback"

    # --- Payment gateway ---
    STRIPE_PUBLISHABLE_KEY: SecretStr = SecretStr("")
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    DONATION_CURRENCY: str = "AUD"
    SETTLEMENT_CURRENCY: str = "BDT"
    SETTLEMENT_RATE: Decimal = Decimal("79")
    MIN_DONATION_AMOUNT: Decimal = Decimal("1")

    # --- Image hosting ---
    IMGBB_API_KEY: SecretStr = SecretStr("")
    IMGBB_UPLOAD_URL: str = "https://api.imgbb.com/1/upload"

    # --- Contact map ---
    MAPS_API_KEY: SecretStr = SecretStr("")
    MAPS_STATIC_URL: str = "https://maps.googleapis.com/maps/api/staticmap"
    MAPS_BROWSER_URL: str = "https://www.google.com/maps/search/"
    CONTACT_LATITUDE: float = 23.8776
    CONTACT_LONGITUDE: float = 90.3775
    CONTACT_MAP_ZOOM: int = 15
    CONTACT_ADDRESS: str = "Sector 7, Uttara, Dhaka 1230, Bangladesh"

    # --- Donation requests / lists ---
    DONOR_PLACEHOLDER: str = "No donor yet"
    PAGE_SIZE: int = Field(default=10, ge=1)
    RECENT_REQUESTS_LIMIT: int = Field(default=3, ge=1)
    DASHBOARD_MAX_WORKERS: int = Field(default=4, ge=1)

    # --- Static reference data ---
    # Empty means "use the JSON files bundled with the package".
    REFERENCE_DATA_DIR: str = ""

    # --- Logging ---
    LOG_FILE: str = "lifestream.log"
    LOG_LEVEL: str = "INFO"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _report_disabled_features(self) -> "AppConfig":
        """Log one warning per integration left unconfigured.

        The client still starts; the affected screens show an explanation
        instead of failing on first use.
        """
        log = logging.getLogger("lifestream.config")
        if not Path(".env").exists():
            log.warning("No .env file in %s; using environment variables and defaults.", Path.cwd())
        for feature in self.disabled_features():
            log.warning("%s is disabled: its settings are empty.", feature)
        return self

    def disabled_features(self) -> list[str]:
        """Human names of the integrations whose credentials are missing."""
        checks = (
            ("Sign-in", bool(self.SUPABASE_URL)),
            ("Card donations", self.payments_enabled),
            ("Avatar and thumbnail upload", bool(self.IMGBB_API_KEY.get_secret_value())),
            ("Contact map preview", bool(self.MAPS_API_KEY.get_secret_value())),
        )
        return [name for name, configured in checks if not configured]

    @property
    def reference_data_path(self) -> Path:
        """Directory holding ``districts.json`` and ``upazilas.json``."""
        if self.REFERENCE_DATA_DIR:
            return Path(self.REFERENCE_DATA_DIR)
        return Path(__file__).resolve().parent / "data"

    @property
    def payments_enabled(self) -> bool:
        return bool(self.STRIPE_PUBLISHABLE_KEY.get_secret_value())


_config: Optional[AppConfig] = None
_config_guard = threading.Lock()


def get_config() -> AppConfig:
    """Process-wide ``AppConfig``, read from the environment on first use.

    Only the logger and the composition root call this; services receive
    the instance through their constructors.
    """
    global _config
    if _config is None:
        with _config_guard:
            if _config is None:
                _config = AppConfig()
    return _config
