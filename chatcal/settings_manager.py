"""
Application settings management for user preferences.

Tracks the default timezone, where exported calendar files go and the
completion model parameters. Settings are persisted to a JSON file so they
survive across runs; CHATCAL_SETTINGS_DIR overrides the location.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TypedDict

from dateutil import tz as dateutil_tz

from chatcal.logging_helper import Log


class SettingsSchema(TypedDict, total=False):
    default_timezone: str
    download_dir: str
    ics_filename: str
    openai_model: str
    openai_temperature: float
    request_timeout_seconds: int


DEFAULT_SETTINGS: SettingsSchema = {
    "default_timezone": "America/New_York",
    "download_dir": str(Path.home() / "Downloads"),
    "ics_filename": "schedule.ics",
    "openai_model": "gpt-4o-2024-08-06",
    "openai_temperature": 0.7,
    "request_timeout_seconds": 30,
}


def settings_dir() -> Path:
    override = os.getenv("CHATCAL_SETTINGS_DIR")
    if override:
        return Path(override)
    return Path.home() / ".config" / "chatcal"


def settings_file() -> Path:
    return settings_dir() / "settings.json"


def _ensure_settings_dir() -> None:
    try:
        settings_dir().mkdir(parents=True, exist_ok=True)
    except OSError as err:
        Log.warn(f"Unable to create settings directory {settings_dir()}: {err}")


def load_settings() -> SettingsSchema:
    """
    Load settings from disk, falling back to defaults if anything fails.
    """
    path = settings_file()
    if not path.exists():
        return DEFAULT_SETTINGS.copy()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("Settings data is not a JSON object")
    except (OSError, ValueError) as err:
        Log.warn(f"Failed to read settings file ({path}): {err}")
        return DEFAULT_SETTINGS.copy()

    merged: SettingsSchema = DEFAULT_SETTINGS.copy()
    # Merge only known keys
    for key in DEFAULT_SETTINGS:
        if key in data:
            merged[key] = data[key]  # type: ignore[literal-required]
    return merged


def save_settings(settings: SettingsSchema) -> None:
    """
    Persist settings to disk.
    """
    _ensure_settings_dir()
    path = settings_file()
    try:
        path.write_text(
            json.dumps(settings, indent=2, sort_keys=True),
            encoding="utf-8",
        )
    except OSError as err:
        Log.warn(f"Failed to write settings file ({path}): {err}")


def get_default_timezone() -> str:
    settings = load_settings()
    value = settings.get("default_timezone") or DEFAULT_SETTINGS["default_timezone"]
    if dateutil_tz.gettz(value) is None:
        Log.warn(f"Invalid default_timezone value '{value}', defaulting to {DEFAULT_SETTINGS['default_timezone']}")
        value = DEFAULT_SETTINGS["default_timezone"]
    return value


def set_default_timezone(value: str) -> None:
    if not value or dateutil_tz.gettz(value) is None:
        raise ValueError(f"Invalid timezone: {value}")
    settings = load_settings()
    settings["default_timezone"] = value
    save_settings(settings)
    Log.info(f"Saved default timezone setting: {value}")


def get_ics_output_path() -> Path:
    """Full path of the exported calendar file (download_dir / ics_filename)."""
    settings = load_settings()
    download_dir = Path(settings.get("download_dir") or DEFAULT_SETTINGS["download_dir"]).expanduser()
    filename = settings.get("ics_filename") or DEFAULT_SETTINGS["ics_filename"]
    return download_dir / filename


def get_openai_options() -> dict:
    """Model name, temperature and request timeout for the completion call."""
    settings = load_settings()
    try:
        temperature = float(settings.get("openai_temperature", DEFAULT_SETTINGS["openai_temperature"]))
        timeout = int(settings.get("request_timeout_seconds", DEFAULT_SETTINGS["request_timeout_seconds"]))
    except (TypeError, ValueError) as err:
        Log.warn(f"Invalid OpenAI settings, using defaults: {err}")
        temperature = DEFAULT_SETTINGS["openai_temperature"]
        timeout = DEFAULT_SETTINGS["request_timeout_seconds"]
    return {
        "model": settings.get("openai_model") or DEFAULT_SETTINGS["openai_model"],
        "temperature": temperature,
        "timeout": timeout,
    }
