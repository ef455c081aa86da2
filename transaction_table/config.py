import os
import logging
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# .env file se DATABASE_URL aur baaki settings uthayega
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./transactions.db"
DEFAULT_API_URL = "http://localhost:7543/api/transactions"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}, using default {default}")
        return default
    if value < 1:
        logger.warning(f"{name} must be positive, got {value}, using default {default}")
        return default
    return value


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _origins_env(name: str) -> List[str]:
    raw = os.getenv(name, "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


@dataclass
class Settings:
    """
    Runtime settings for the API server and the table client.
    """
    database_url: str = DEFAULT_DATABASE_URL
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    max_page_limit: int = 100
    query_workers: int = 4
    create_tables: bool = True
    log_level: str = "INFO"
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL,
            cors_allow_origins=_origins_env("CORS_ALLOW_ORIGINS"),
            max_page_limit=_int_env("MAX_PAGE_LIMIT", 100),
            query_workers=_int_env("QUERY_WORKERS", 4),
            create_tables=_bool_env("CREATE_TABLES", True),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
            api_url=os.getenv("TABLE_API_URL") or DEFAULT_API_URL,
        )
