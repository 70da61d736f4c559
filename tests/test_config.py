import json

from contest_logger.config import Contest, Settings, Station, config_path, load_settings


def test_default_settings(tmp_path):
    """Defaults are used when no settings file exists."""
    settings = load_settings(tmp_path / "settings.json")
    assert settings == Settings()
    assert settings.contest.enter_their_number is True
    assert settings.contest.enter_their_xchange is True
    assert settings.contest.require_their_xchange is False
    assert settings.station.callsign == ""


def test_custom_settings(tmp_path, monkeypatch):
    """Settings from the file override the defaults, via the env override."""
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "station": {"callsign": "dl0abc"},
                "contest": {"enter_their_number": False, "require_their_xchange": True},
                "keyer": {"wpm": 28},
            }
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("CONTEST_LOGGER_CONFIG", str(path))

    assert config_path() == path
    settings = load_settings()
    assert settings.station == Station(callsign="DL0ABC")
    assert settings.contest == Contest(enter_their_number=False, require_their_xchange=True)


def test_wrong_types_are_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"contest": {"enter_their_xchange": "no", "allow_multi_band": 0}}), encoding="utf-8")

    settings = load_settings(path)
    assert settings.contest == Contest()


def test_malformed_settings_fall_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == Settings()
