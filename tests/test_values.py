import pytest

from contest_logger.errors import (
    InvalidBand,
    InvalidCallsign,
    InvalidMode,
    InvalidNumber,
    InvalidReport,
    ParseError,
)
from contest_logger.values import (
    Band,
    Mode,
    format_number,
    parse_band,
    parse_callsign,
    parse_kilohertz,
    parse_mode,
    parse_number,
    parse_report,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("DL1ABC", "DL1ABC"),
        ("dl1abc", "DL1ABC"),
        (" K7MJG ", "K7MJG"),
        ("W1AW", "W1AW"),
        ("3DA0XYZ", "3DA0XYZ"),
        ("DL/K1ABC", "DL/K1ABC"),
        ("DL1ABC/P", "DL1ABC/P"),
        ("EA8/DL1ABC/QRP", "EA8/DL1ABC/QRP"),
    ],
)
def test_parse_valid_callsigns(text, expected):
    """Valid callsigns are accepted and uppercased."""
    assert parse_callsign(text) == expected


@pytest.mark.parametrize("text", ["", "DL", "DL1", "7028", "1ABC", "DL1ABC/", "DL 1ABC", "DL1ABCDEF"])
def test_parse_invalid_callsigns(text):
    """Malformed callsigns raise InvalidCallsign."""
    with pytest.raises(InvalidCallsign):
        parse_callsign(text)


@pytest.mark.parametrize("text", ["599", "559", "111", "579", "339"])
def test_parse_valid_reports(text):
    assert parse_report(text) == text


@pytest.mark.parametrize("text", ["", "59", "000", "699", "509", "590", "5999", "abc"])
def test_parse_invalid_reports(text):
    """Reports must be three digits, 1-5 then two non-zero digits."""
    with pytest.raises(InvalidReport):
        parse_report(text)


def test_parse_and_format_numbers():
    """Serial numbers accept leading zeros and render with three digits."""
    assert parse_number("012") == 12
    assert parse_number("1") == 1
    assert parse_number("1234") == 1234
    assert format_number(1) == "001"
    assert format_number(34) == "034"
    assert format_number(1234) == "1234"


@pytest.mark.parametrize("text", ["", "0", "abc", "-1", "1.5"])
def test_parse_invalid_numbers(text):
    with pytest.raises(InvalidNumber):
        parse_number(text)


def test_parse_band_and_mode():
    """Band and mode text resolves case-insensitively against the enumerations."""
    assert parse_band("40m") == Band.BAND_40M
    assert parse_band("40M") == Band.BAND_40M
    assert parse_band("70cm") == Band.BAND_70CM
    assert parse_mode("cw") == Mode.CW
    assert parse_mode("RTTY") == Mode.RTTY
    assert str(Band.BAND_160M) == "160m"
    assert str(Mode.SSB) == "SSB"


@pytest.mark.parametrize("text", ["", "41m", "forty"])
def test_parse_unknown_band(text):
    with pytest.raises(InvalidBand):
        parse_band(text)


def test_parse_unknown_mode():
    with pytest.raises(InvalidMode):
        parse_mode("PSK31")
    # All parse failures share one base class
    with pytest.raises(ParseError):
        parse_mode("")


def test_parse_kilohertz():
    """Numbers typed in kHz become Hz; anything else is not a frequency."""
    assert parse_kilohertz("7028") == 7028000
    assert parse_kilohertz("14025.5") == 14025500
    assert parse_kilohertz("DL1ABC") is None
    assert parse_kilohertz("") is None
    assert parse_kilohertz("0") is None
    assert parse_kilohertz("nan") is None
