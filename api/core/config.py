"""
Process configuration read from environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_CORS_ORIGIN_REGEX = r"(?i)^https?://localhost(:\d+)?$|.*apleno.*"


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    data_dir: Path = DEFAULT_DATA_DIR
    db_filename: str = "comments.db"
    cors_origin_regex: str = DEFAULT_CORS_ORIGIN_REGEX
    max_body_bytes: int = 64 * 1024
    rate_limit_max: int = 30
    rate_limit_window_s: int = 60
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def database_path(self) -> Path:
        return self.data_dir / self.db_filename


def load_settings() -> Settings:
    # NODE_ENV is still honoured for deployments that set it.
    environment = _env_str("APP_ENV", _env_str("NODE_ENV", "development")).lower()
    return Settings(
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 3000),
        environment=environment,
        data_dir=Path(_env_str("DATA_DIR", str(DEFAULT_DATA_DIR))),
        db_filename=_env_str("DB_FILENAME", "comments.db"),
        cors_origin_regex=_env_str("CORS_ORIGIN_REGEX", DEFAULT_CORS_ORIGIN_REGEX),
        max_body_bytes=_env_int("MAX_BODY_BYTES", 64 * 1024),
        rate_limit_max=_env_int("RATE_LIMIT_MAX", 30),
        rate_limit_window_s=_env_int("RATE_LIMIT_WINDOW_S", 60),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
