"""Domain values and their text parsers.

Everything in here is pure: a parser takes the raw text from an entry field
and either returns a typed value or raises one of the errors from
:mod:`contest_logger.errors`.

- `parse_callsign` normalizes and checks a callsign against the call grammar.
- `parse_report` accepts a 3 digit RST report.
- `parse_number` / `format_number` handle serial numbers (QSO numbers).
- `parse_band` / `parse_mode` resolve text against the fixed enumerations.
- `parse_kilohertz` turns a frequency typed in kHz into Hz.
"""

from __future__ import annotations

import math
import re
from enum import Enum
from typing import Optional

from .errors import InvalidBand, InvalidCallsign, InvalidMode, InvalidNumber, InvalidReport

# A frequency in Hz.
Frequency = float

# Optional prefix (DL/, 3DA0/), base call, optional suffix (/P, /QRP, /9).
_CALLSIGN_RE = re.compile(
    r"^(?:(?P<prefix>[A-Z0-9]{1,4})/)?"
    r"(?P<base>(?:[A-Z]{1,2}|[0-9][A-Z]{1,2}|[A-Z][0-9])[0-9]{1,4}[A-Z]{1,4})"
    r"(?:/(?P<suffix>[A-Z0-9]{1,4}))?$"
)
_REPORT_RE = re.compile(r"^[1-5][1-9][1-9]$")

DEFAULT_REPORT = "599"


class Band(str, Enum):
    """Amateur radio bands usable in a contest; NO_BAND matches any band."""

    NO_BAND = ""
    BAND_160M = "160m"
    BAND_80M = "80m"
    BAND_60M = "60m"
    BAND_40M = "40m"
    BAND_30M = "30m"
    BAND_20M = "20m"
    BAND_17M = "17m"
    BAND_15M = "15m"
    BAND_12M = "12m"
    BAND_10M = "10m"
    BAND_6M = "6m"
    BAND_2M = "2m"
    BAND_70CM = "70cm"

    def __str__(self) -> str:
        return self.value


class Mode(str, Enum):
    """Operating modes; NO_MODE matches any mode."""

    NO_MODE = ""
    CW = "CW"
    SSB = "SSB"
    FM = "FM"
    RTTY = "RTTY"
    DIGI = "DIGI"

    def __str__(self) -> str:
        return self.value


def parse_callsign(text: str) -> str:
    """Return the uppercased callsign or raise InvalidCallsign."""
    call = (text or "").strip().upper()
    if not _CALLSIGN_RE.match(call):
        raise InvalidCallsign(f"{text!r} is not a valid callsign")
    return call


def parse_report(text: str) -> str:
    """Return a valid RST report such as "599" or raise InvalidReport."""
    report = (text or "").strip()
    if not _REPORT_RE.match(report):
        raise InvalidReport(f"{text!r} is not a valid report")
    return report


def parse_number(text: str) -> int:
    """Parse a serial number; leading zeros are allowed ("012" -> 12)."""
    s = (text or "").strip()
    if not s.isdigit() or int(s) <= 0:
        raise InvalidNumber(f"{text!r} is not a valid number")
    return int(s)


def format_number(number: int) -> str:
    """Render a serial number zero-padded to three digits."""
    return f"{number:03d}"


def parse_band(text: str) -> Band:
    s = (text or "").strip().lower()
    for band in Band:
        if band is not Band.NO_BAND and band.value == s:
            return band
    raise InvalidBand(f"{text!r} is not a known band")


def parse_mode(text: str) -> Mode:
    s = (text or "").strip().upper()
    for mode in Mode:
        if mode is not Mode.NO_MODE and mode.value == s:
            return mode
    raise InvalidMode(f"{text!r} is not a known mode")


def parse_kilohertz(text: str) -> Optional[Frequency]:
    """Interpret text as a frequency in kHz and return it in Hz.

    Returns None when the text is not a positive number, so callers can
    use this to tell a frequency entry apart from a callsign.
    """
    try:
        khz = float((text or "").strip())
    except ValueError:
        return None
    if not math.isfinite(khz) or khz <= 0:
        return None
    return khz * 1000
