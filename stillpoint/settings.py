"""Application settings with JSON persistence.

Settings are stored at ``$STILLPOINT_HOME/settings.json`` (default
``~/.stillpoint``).

Usage::

    settings = load_settings()
    settings.default_minutes = 20
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path

logger = logging.getLogger(__name__)

APP_DATA_DIR = Path(os.environ.get("STILLPOINT_HOME", Path.home() / ".stillpoint"))
SETTINGS_PATH = APP_DATA_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    default_minutes: int = 15
    resume_on_launch: bool = False         # keep counting after a restart

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_to_console: bool = False

    # ── storage ───────────────────────────────────────────────────────
    db_url: str | None = None              # None → sqlite file in APP_DATA_DIR


def load_settings(path: Path = SETTINGS_PATH) -> Settings:
    """Load settings from disk, falling back to defaults."""
    if not path.exists():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        # Only use keys that exist in the dataclass
        valid_keys = {f.name for f in fields(Settings)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Unreadable settings at %s, using defaults: %s", path, exc)
        return Settings()


def save_settings(settings: Settings, path: Path = SETTINGS_PATH) -> None:
    """Write settings to disk as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
