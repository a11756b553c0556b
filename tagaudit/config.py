"""Centralised settings for the Tag Audit service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # HTTP server
    # ------------------------------------------------------------------
    host: str = field(
        default_factory=lambda: os.environ.get("TAGAUDIT_HOST", "127.0.0.1")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("TAGAUDIT_PORT", "3050"))
    )
    static_dir: Path | None = field(
        default_factory=lambda: (
            Path(os.environ["TAGAUDIT_STATIC_DIR"])
            if os.environ.get("TAGAUDIT_STATIC_DIR")
            else None
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("TAGAUDIT_LOG_LEVEL", "INFO")
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("USER_AGENT", _BROWSER_UA)
    )
    probe_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PROBE_TIMEOUT", "5.0"))
    )
    max_sized_resources: int = field(
        default_factory=lambda: int(os.environ.get("MAX_SIZED_RESOURCES", "30"))
    )


# Module-level singleton, import this everywhere:
#   from tagaudit.config import settings
settings = Settings()
