"""Error taxonomy for QSO entry.

ParseError covers malformed values (callsign, report, number, band, mode).
ValidationError covers values that are missing under the current contest
configuration. Both are ValueErrors so callers may treat them uniformly.
"""

from __future__ import annotations


class ParseError(ValueError):
    """Raw text could not be converted into a domain value."""


class InvalidCallsign(ParseError):
    pass


class InvalidReport(ParseError):
    pass


class InvalidNumber(ParseError):
    pass


class InvalidBand(ParseError):
    pass


class InvalidMode(ParseError):
    pass


class ValidationError(ValueError):
    """A required value is missing given the contest configuration."""


class MissingXchange(ValidationError):
    pass
