from __future__ import annotations

import os
from dataclasses import dataclass

PRODUCTION = "production"


@dataclass(frozen=True)
class ServiceConfig:
    """Process-wide settings, read once when the app is created."""

    environment: str = "development"
    log_level: str = "INFO"
    docs_path: str = "/api"

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            environment=os.environ.get("SIMPLE_KSEF_ENV", "development").strip().lower()
            or "development",
            log_level=os.environ.get("SIMPLE_KSEF_LOG_LEVEL", "INFO").strip().upper()
            or "INFO",
            docs_path=os.environ.get("SIMPLE_KSEF_DOCS_PATH", "/api").strip() or "/api",
        )
