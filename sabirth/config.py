"""
Configuration - Settings read from the environment.

    SABIRTH_ENV           development | production   (default: development)
    SABIRTH_STORE_PATH    JSON store file; in-memory when unset
    SABIRTH_HUB_URL       escrow Hub base URL
    SABIRTH_HUB_TIMEOUT   Hub request timeout in seconds (default: 10)
    SABIRTH_GAME_ID       caller id sent with every lock (default: sa-birth)
    SABIRTH_SESSION_TTL   record lifetime in seconds (default: 30 days)
    SABIRTH_LOG_LEVEL     logging level (default: INFO)
    ALLOWED_ORIGINS       comma-separated CORS origins (default: *)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os

from .engine_core.state import SESSION_TTL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    env: str = "development"
    store_path: str | None = None
    hub_url: str | None = None
    hub_timeout: float = 10.0
    game_id: str = "sa-birth"
    session_ttl: int = SESSION_TTL
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def is_development(self) -> bool:
        return self.env == "development"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            env=os.getenv("SABIRTH_ENV", "development"),
            store_path=os.getenv("SABIRTH_STORE_PATH") or None,
            hub_url=os.getenv("SABIRTH_HUB_URL") or None,
            hub_timeout=float(os.getenv("SABIRTH_HUB_TIMEOUT", "10")),
            game_id=os.getenv("SABIRTH_GAME_ID", "sa-birth"),
            session_ttl=int(os.getenv("SABIRTH_SESSION_TTL", str(SESSION_TTL))),
            log_level=os.getenv("SABIRTH_LOG_LEVEL", "INFO").upper(),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        )


def configure_logging(settings: Settings):
    """Set up root logging from settings."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
