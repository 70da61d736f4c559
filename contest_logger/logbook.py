"""The logbook: an append-only history of QSOs.

Editing a contact never changes a stored row. Instead a new row with the same
QSO number (my_number) is appended, and the views that need one entry per
contact keep the row with the latest log timestamp. The full history can
therefore always be written back to a store in its original order.

The logbook also owns QSO numbering, the last used band/mode, duplicate
lookups, and row selection for an attached list view.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Set, Tuple

from .clock import Clock
from .events import Listeners
from .models import QSO
from .values import Band, Mode

logger = logging.getLogger(__name__)


class LogbookView(Protocol):
    """The visual part of the log, usually a list of rows."""

    def update_all_rows(self, qsos: List[QSO]) -> None: ...

    def row_added(self, qso: QSO) -> None: ...

    def select_row(self, index: int) -> None: ...


class Reader(Protocol):
    def read_all(self) -> List[QSO]: ...


class Writer(Protocol):
    def write(self, qso: QSO) -> None: ...


class Store(Reader, Writer, Protocol):
    def clear(self) -> None: ...


class NullLogbookView:
    def update_all_rows(self, qsos: List[QSO]) -> None:
        pass

    def row_added(self, qso: QSO) -> None:
        pass

    def select_row(self, index: int) -> None:
        pass


class SelectionMode(Enum):
    """Whether selection events from the view are currently delivered.

    While the logbook itself drives the view (refresh, append, focusing a
    row) the view may report selections back; those are ignored in
    INTERNAL_UPDATE mode so they do not reach the row-selected listeners.
    """

    QUIESCENT = "quiescent"
    INTERNAL_UPDATE = "internal update"


class Logbook:
    """Ordered store of committed QSOs."""

    def __init__(self, clock: Clock, qsos: Optional[Iterable[QSO]] = None) -> None:
        self.clock = clock
        self._qsos: List[QSO] = list(qsos or [])
        self._my_last_number = _last_number(self._qsos)
        self._view: LogbookView = NullLogbookView()
        self._selection_mode = SelectionMode.QUIESCENT
        self._row_added: Listeners[QSO] = Listeners("row added")
        self._row_selected: Listeners[QSO] = Listeners("row selected")
        self.failed_writes: List[Tuple[QSO, Exception]] = []

    @classmethod
    def load(cls, clock: Clock, reader: Reader) -> "Logbook":
        """Create a logbook filled with everything the reader returns.

        Errors from the reader propagate; there is no partial load.
        """
        logger.info("Loading QSOs")
        return cls(clock, reader.read_all())

    def __len__(self) -> int:
        return len(self._qsos)

    @property
    def qsos(self) -> List[QSO]:
        """A copy of all rows in append order."""
        return list(self._qsos)

    @property
    def selection_mode(self) -> SelectionMode:
        return self._selection_mode

    @contextmanager
    def _internal_update(self) -> Iterator[None]:
        previous = self._selection_mode
        self._selection_mode = SelectionMode.INTERNAL_UPDATE
        try:
            yield
        finally:
            self._selection_mode = previous

    # View and listeners

    def set_view(self, view: Optional[LogbookView]) -> None:
        if view is None:
            self._view = NullLogbookView()
            return
        self._view = view
        with self._internal_update():
            self._view.update_all_rows(self.qsos)

    def on_row_added(self, listener: Callable[[QSO], object]) -> None:
        self._row_added.add(listener)

    def clear_row_added_listeners(self) -> None:
        self._row_added.clear()

    def on_row_selected(self, listener: Callable[[QSO], object]) -> None:
        self._row_selected.add(listener)

    def clear_row_selected_listeners(self) -> None:
        self._row_selected.clear()

    # Selection

    def select(self, index: int) -> None:
        """Handle a selection made in the view by the user."""
        if index < 0 or index >= len(self._qsos):
            logger.warning("invalid QSO index %d", index)
            return
        if self._selection_mode is SelectionMode.INTERNAL_UPDATE:
            return
        self._row_selected.emit(self._qsos[index])

    def select_qso(self, qso: QSO) -> None:
        """Focus the most recent row of the given QSO number in the view."""
        logger.debug("select qso #%d", qso.my_number)
        index = self.index_of(qso.my_number)
        if index is None:
            logger.debug("qso #%d not found", qso.my_number)
            return
        with self._internal_update():
            self._view.select_row(index)

    def select_last_qso(self) -> None:
        if not self._qsos:
            return
        with self._internal_update():
            self._view.select_row(len(self._qsos) - 1)

    def index_of(self, my_number: int) -> Optional[int]:
        """Row index of the most recent version of QSO my_number, or None."""
        for i in range(len(self._qsos) - 1, -1, -1):
            if self._qsos[i].my_number == my_number:
                return i
        return None

    # Numbering

    def next_number(self) -> int:
        return self._my_last_number + 1

    def last_band(self) -> Band:
        if not self._qsos:
            return Band.NO_BAND
        return self._qsos[-1].band

    def last_mode(self) -> Mode:
        if not self._qsos:
            return Mode.NO_MODE
        return self._qsos[-1].mode

    # Appending

    def log(self, qso: QSO) -> QSO:
        """Append a QSO stamped with the current time and notify listeners.

        Row-added listeners (such as a store writing through) run in
        registration order. Their failures are logged and kept in
        `failed_writes`; the QSO stays in the log regardless.
        """
        qso = qso.model_copy(update={"log_timestamp": self.clock.now()})
        with self._internal_update():
            self._qsos.append(qso)
            self._my_last_number = max(self._my_last_number, qso.my_number)
            self._view.row_added(qso)
            for _, err in self._row_added.emit(qso):
                self.failed_writes.append((qso, err))
        logger.info("QSO added: %s", qso)
        return qso

    # Lookups

    def find(self, call: str) -> Optional[QSO]:
        """Return the latest version of the most recent QSO with this callsign."""
        return next(self._latest_matching(call, Band.NO_BAND, Mode.NO_MODE), None)

    def find_all(self, call: str, band: Band = Band.NO_BAND, mode: Mode = Mode.NO_MODE) -> List[QSO]:
        """Return the latest version of every QSO matching call, band and mode.

        NO_BAND / NO_MODE act as wildcards. Results are most recent first.
        """
        return list(self._latest_matching(call, band, mode))

    def find_duplicate_qsos(
        self, call: str, band: Band = Band.NO_BAND, mode: Mode = Mode.NO_MODE
    ) -> List[QSO]:
        """Contacts that make a new QSO with call on band/mode a dupe."""
        return self.find_all(call, band, mode)

    def _latest_matching(self, call: str, band: Band, mode: Mode) -> Iterator[QSO]:
        # Scanning backwards means the first row seen for a number is its latest edit.
        checked: Set[int] = set()
        for qso in reversed(self._qsos):
            if qso.my_number in checked:
                continue
            checked.add(qso.my_number)

            if qso.call != call:
                continue
            if band != Band.NO_BAND and band != qso.band:
                continue
            if mode != Mode.NO_MODE and mode != qso.mode:
                continue
            yield qso

    # Ordered views

    def qsos_ordered_by_my_number(self) -> List[QSO]:
        """All rows, including superseded edits, ordered for scoring."""
        return _by_my_number(self._qsos)

    def unique_qsos_ordered_by_my_number(self) -> List[QSO]:
        """One row per QSO number, the latest edit of each."""
        return _by_my_number(_unique(self._qsos))

    def write_all(self, writer: Writer) -> None:
        """Write every row in append order.

        Raises RuntimeError naming the first QSO that cannot be written.
        """
        for qso in self._qsos:
            try:
                writer.write(qso)
            except Exception as e:
                raise RuntimeError(f"Cannot write QSO {qso}: {e}") from e


def _last_number(qsos: Iterable[QSO]) -> int:
    return max((q.my_number for q in qsos), default=0)


def _by_my_number(qsos: Iterable[QSO]) -> List[QSO]:
    # sorted() is stable, so rows with equal keys keep their append order.
    return sorted(qsos, key=lambda q: (q.my_number, q.log_timestamp is not None, q.log_timestamp))


def _unique(qsos: Iterable[QSO]) -> List[QSO]:
    latest: Dict[int, QSO] = {}
    for qso in qsos:
        former = latest.get(qso.my_number)
        if former is None or not _is_before(qso, former):
            latest[qso.my_number] = qso
    return list(latest.values())


def _is_before(a: QSO, b: QSO) -> bool:
    """True if a was logged strictly before b; rows without a timestamp come first."""
    if a.log_timestamp is None:
        return b.log_timestamp is not None
    if b.log_timestamp is None:
        return False
    return a.log_timestamp < b.log_timestamp
