"""Application settings with JSON persistence.

These are app-level knobs, not user timer preferences (those live in
the preference store).  Settings are stored at:
    ~/Library/Application Support/MenuTimer/settings.json

Usage::

    settings = load_settings()
    settings.log_level = "DEBUG"
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path


logger = logging.getLogger(__name__)

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "MenuTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All app-level configuration."""

    # ── timer ─────────────────────────────────────────────────────────
    tick_interval_ms: int = 100
    max_recent_timers: int = 5

    # ── alerts ────────────────────────────────────────────────────────
    sound_enabled: bool = True             # master mute over per-timer settings
    sound_volume: int = 70                 # 0-100

    # ── menu bar ──────────────────────────────────────────────────────
    # Prefix the stage label to the countdown in the tray tooltip.  A Qt
    # tray icon cannot draw text next to itself, so the tooltip is the
    # only place the title appears.
    show_label_in_menu_bar: bool = True

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_to_file: bool = True


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings at %s: %s", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
