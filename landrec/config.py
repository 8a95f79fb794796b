# landrec/config.py

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str
    sql_echo: bool
    auth_url: str
    auth_api_key: str
    auth_timeout_s: float
    log_level: str
    geolocation_timeout_s: float
    camera_timeout_s: float
    api_base_url: str


@lru_cache
def get_settings() -> Settings:
    """Read settings from the environment (and .env, if present)."""
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./landrec.db"),
        sql_echo=_env_bool("SQL_ECHO"),
        auth_url=os.getenv("AUTH_URL", "").rstrip("/"),
        auth_api_key=os.getenv("AUTH_API_KEY", ""),
        auth_timeout_s=_env_float("AUTH_TIMEOUT_S", 10.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        # the browser client used timeout: 10000 with maximumAge: 0
        geolocation_timeout_s=_env_float("GEOLOCATION_TIMEOUT_S", 10.0),
        camera_timeout_s=_env_float("CAMERA_TIMEOUT_S", 30.0),
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/"),
    )
