"""Station and contest settings.

Settings are immutable snapshots. The entry controller receives a new
`Contest` through `contest_changed` instead of asking a shared settings
object on every call.

`load_settings` reads optional JSON to override the defaults:

    {
      "station": {"callsign": "DL0ABC"},
      "contest": {"enter_their_number": true, "require_their_xchange": false}
    }

Unknown keys are ignored; a malformed file falls back to the defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

APP_NAME = "Contest Logger"
CONFIG_ENV_VAR = "CONTEST_LOGGER_CONFIG"
CONFIG_FILENAME = "settings.json"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Station:
    callsign: str = ""


@dataclass(frozen=True)
class Contest:
    """Which exchange fields are entered and required, and dupe scope."""

    enter_their_number: bool = True
    enter_their_xchange: bool = True
    require_their_xchange: bool = False
    allow_multi_band: bool = True
    allow_multi_mode: bool = True


@dataclass(frozen=True)
class Settings:
    station: Station = field(default_factory=Station)
    contest: Contest = field(default_factory=Contest)


def config_path() -> Path:
    """Resolve the JSON settings file path, honoring the env override."""
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    cfg_dir = Path(user_config_dir(appname=APP_NAME, appauthor=False))
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir / CONFIG_FILENAME


def _apply(target: Any, raw: Any) -> Any:
    """Return a copy of the dataclass target with the matching keys of raw applied.

    Values must have the same type as the default they replace.
    """
    if not isinstance(raw, dict):
        return target
    changes: Dict[str, Any] = {}
    for f in fields(target):
        if f.name in raw and isinstance(raw[f.name], type(getattr(target, f.name))):
            changes[f.name] = raw[f.name]
    return replace(target, **changes)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from JSON, overriding the defaults."""
    p = path or config_path()
    settings = Settings()
    try:
        if p.exists():
            with p.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            if isinstance(raw, dict):
                station = _apply(settings.station, raw.get("station"))
                if station.callsign:
                    station = replace(station, callsign=station.callsign.upper())
                settings = Settings(
                    station=station,
                    contest=_apply(settings.contest, raw.get("contest")),
                )
    except (IOError, OSError, json.JSONDecodeError, ValueError, TypeError) as e:
        logger.warning("Ignoring settings file %s: %s", p, e)
    return settings
