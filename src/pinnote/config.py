"""Configuration for the pinnote service.

Reads from config/pinnote.ini if present, environment variables override.
Secrets never checked into version control.
"""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path

_CONFIG_FILE = Path(__file__).resolve().parent.parent.parent / "config" / "pinnote.ini"

_INT_FIELDS = {"port", "mongo_timeout_ms", "token_ttl_minutes"}


@dataclass(frozen=True)
class PinnoteConfig:
    """Service configuration. Immutable once loaded."""

    mongo_uri: str = "mongodb://127.0.0.1:27017"
    mongo_db: str = "pinnote"
    mongo_timeout_ms: int = 5000
    token_secret: str = ""
    token_algorithm: str = "HS256"
    token_ttl_minutes: int = 60 * 24 * 7
    avatar_path: str = ""
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"


_INI_MAP = {
    "mongo": [
        ("uri", "mongo_uri"),
        ("database", "mongo_db"),
        ("timeout_ms", "mongo_timeout_ms"),
    ],
    "tokens": [
        ("secret", "token_secret"),
        ("algorithm", "token_algorithm"),
        ("ttl_minutes", "token_ttl_minutes"),
    ],
    "server": [
        ("avatar_path", "avatar_path"),
        ("host", "host"),
        ("port", "port"),
        ("log_level", "log_level"),
    ],
}

_ENV_MAP = {
    "PINNOTE_MONGO_URI": "mongo_uri",
    "PINNOTE_MONGO_DB": "mongo_db",
    "PINNOTE_MONGO_TIMEOUT_MS": "mongo_timeout_ms",
    "PINNOTE_TOKEN_SECRET": "token_secret",
    "PINNOTE_TOKEN_ALGORITHM": "token_algorithm",
    "PINNOTE_TOKEN_TTL_MINUTES": "token_ttl_minutes",
    "PINNOTE_AVATAR_PATH": "avatar_path",
    "PINNOTE_HOST": "host",
    "PINNOTE_PORT": "port",
    "PINNOTE_LOG_LEVEL": "log_level",
}


def _coerce(config_key: str, val: str):
    if config_key in _INT_FIELDS:
        return int(val)
    return val


def load_config(config_path: Path | None = None) -> PinnoteConfig:
    """Load config from INI file, then override with environment variables."""
    path = config_path or _CONFIG_FILE
    kwargs: dict = {}

    if path.exists():
        parser = configparser.ConfigParser()
        parser.read(path)
        for section, keys in _INI_MAP.items():
            if not parser.has_section(section):
                continue
            for ini_key, config_key in keys:
                val = parser.get(section, ini_key, fallback=None)
                if val is not None:
                    kwargs[config_key] = _coerce(config_key, val)

    for env_key, config_key in _ENV_MAP.items():
        val = os.getenv(env_key)
        if val is not None:
            kwargs[config_key] = _coerce(config_key, val)

    return PinnoteConfig(**kwargs)
