# promptiq/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


def _csv(value: str) -> List[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


@dataclass
class Settings:
    """Runtime configuration; production values come from environment variables."""

    database_url: str = "sqlite:///./promptiq.db"
    create_tables: bool = True

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # share URLs and Stripe redirects are built on top of this
    public_url: str = "http://localhost:3000"

    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    stripe_price_architect: str = ""
    stripe_price_studio: str = ""

    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    app_version: str = "0.1.0"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./promptiq.db"),
            create_tables=os.getenv("CREATE_TABLES", "true").lower() in ("1", "true", "yes"),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            public_url=os.getenv("PUBLIC_URL", "http://localhost:3000").rstrip("/"),
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", ""),
            stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", ""),
            stripe_price_architect=os.getenv("STRIPE_PRICE_ARCHITECT", ""),
            stripe_price_studio=os.getenv("STRIPE_PRICE_STUDIO", ""),
            cors_origins=_csv(os.getenv("CORS_ORIGINS", "http://localhost:3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_version=os.getenv("APP_VERSION", "0.1.0"),
        )
