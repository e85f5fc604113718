from __future__ import annotations

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import FrozenSet
from dotenv import load_dotenv

# Load variables from .env.example first (as defaults), then .env to override
project_root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=project_root / ".env.example", override=False)
load_dotenv(dotenv_path=project_root / ".env", override=True)


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key, default)
    return v


def _getbool(key: str, default: bool = False) -> bool:
    v = _getenv(key)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def parse_collections(raw: str | None) -> FrozenSet[str]:
    """Split a comma-separated allow-list, dropping blanks."""
    if not raw or not raw.strip():
        return frozenset()
    return frozenset(s.strip() for s in raw.split(",") if s.strip())


@dataclass
class Settings:
    app_env: str = _getenv("APP_ENV", "development") or "development"
    log_level: str = (_getenv("LOG_LEVEL", "INFO") or "INFO").upper()
    page_size: int = int(_getenv("PAGE_SIZE", "10") or 10)

    # OpenSearch
    os_host: str = _getenv("OPENSEARCH_HOST", "localhost") or "localhost"
    os_port: int = int(_getenv("OPENSEARCH_PORT", "9200") or 9200)
    os_user: str | None = _getenv("OPENSEARCH_USER")
    os_password: str | None = _getenv("OPENSEARCH_PASSWORD")
    os_use_ssl: bool = _getbool("OPENSEARCH_USE_SSL", False)
    os_timeout: int = int(_getenv("OPENSEARCH_TIMEOUT", "20") or 20)

    # Collections that may be written to or searched; empty means all
    collections: FrozenSet[str] = field(default_factory=lambda: parse_collections(_getenv("COLLECTIONS")))

    # Indexing
    index_batch_size: int = int(_getenv("INDEX_BATCH_SIZE", "1000") or 1000)
    max_input_chars: int = int(_getenv("MAX_INPUT_CHARS", str(50 * 1024 * 1024)) or 50 * 1024 * 1024)


settings = Settings()
