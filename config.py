import os
from dataclasses import dataclass, field
from typing import List, Optional


def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
    # Local JSON store directory, used unless DATABASE_URL points at MongoDB
    data_dir: str = field(default_factory=lambda: os.getenv("DAIRY_DATA_DIR", "data"))
    database_url: Optional[str] = field(default_factory=lambda: os.getenv("DATABASE_URL") or None)
    database_name: str = field(default_factory=lambda: os.getenv("DATABASE_NAME", "yadukul_dairy"))

    # Simulated latency of every API call, in milliseconds
    latency_ms: int = field(default_factory=lambda: int(os.getenv("DAIRY_LATENCY_MS", "500")))
    dashboard_latency_ms: int = field(default_factory=lambda: int(os.getenv("DAIRY_DASHBOARD_LATENCY_MS", "800")))

    admin_password: str = field(default_factory=lambda: os.getenv("DAIRY_ADMIN_PASSWORD", "admin123"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    cors_origins: List[str] = field(default_factory=lambda: _split(os.getenv("CORS_ORIGINS", "*")))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", 8000)))


def get_settings() -> Settings:
    return Settings()
