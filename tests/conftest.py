import pytest


class Recorder:
    """Accepts any method call and remembers it as (name, *args)."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args):
            self.calls.append((name,) + args)

        return record

    def called(self, name, *args):
        return (name,) + args in self.calls

    def count(self, name):
        return sum(1 for c in self.calls if c[0] == name)

    def last(self, name):
        matching = [c[1:] for c in self.calls if c[0] == name]
        return matching[-1] if matching else None

    def reset(self):
        self.calls = []


@pytest.fixture
def clock():
    """A static clock at a fixed UTC time."""
    from datetime import datetime

    from contest_logger.clock import StaticClock

    return StaticClock(datetime(2006, 1, 2, 15, 4, 5))


@pytest.fixture
def make_qso(clock):
    """Factory for QSOs with sensible contest defaults."""
    from contest_logger.models import QSO
    from contest_logger.values import Band, Mode

    def _make(call="DL1ABC", my_number=1, band=Band.BAND_40M, mode=Mode.CW, **kwargs):
        values = dict(
            call=call,
            time=clock.now(),
            band=band,
            mode=mode,
            their_report="599",
            my_report="599",
            my_number=my_number,
        )
        values.update(kwargs)
        return QSO(**values)

    return _make


@pytest.fixture
def recorder():
    """Factory for call-recording view doubles."""
    return Recorder


@pytest.fixture
def make_controller(clock):
    """Build an entry controller on a fresh logbook with recording views.

    Returns (logbook, controller, entry_view, logbook_view).
    """
    from contest_logger.config import Contest
    from contest_logger.entry import EntryController
    from contest_logger.logbook import Logbook

    def _make(contest=None, qsos=None):
        logbook = Logbook(clock, qsos)
        logbook_view = Recorder()
        logbook.set_view(logbook_view)
        controller = EntryController(
            clock,
            logbook,
            contest or Contest(enter_their_number=True, enter_their_xchange=True),
        )
        entry_view = Recorder()
        controller.set_view(entry_view)
        entry_view.reset()
        logbook_view.reset()
        return logbook, controller, entry_view, logbook_view

    return _make


@pytest.fixture
def temp_db(tmp_path):
    """Point the default database path at a temporary file."""
    import os

    # Store original value if it exists
    original_db_path = os.environ.get("CONTEST_LOGGER_DB_PATH")

    db_path = tmp_path / "test.sqlite3"
    os.environ["CONTEST_LOGGER_DB_PATH"] = str(db_path)

    try:
        yield db_path
    finally:
        # Cleanup - restore original value or remove if it wasn't set
        if original_db_path:
            os.environ["CONTEST_LOGGER_DB_PATH"] = original_db_path
        elif "CONTEST_LOGGER_DB_PATH" in os.environ:
            del os.environ["CONTEST_LOGGER_DB_PATH"]
