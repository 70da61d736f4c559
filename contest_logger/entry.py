"""QSO data entry.

The entry controller owns the text the operator is typing (`InputState`),
decides which field is active next, validates the input when the QSO is
logged, and commits it to the logbook.

Field order is driven by the contest settings: callsign, their report, then
their number and their exchange if the contest uses them, and back to the
callsign. The remaining fields (band, mode and our own exchange) are edited
out of band and always hand focus back to the callsign.

Edits work by re-logging: selecting a logged QSO loads it for editing, and
logging it again appends a new row carrying the same QSO number.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Protocol

from .clock import Clock
from .config import Contest
from .errors import MissingXchange, ParseError, ValidationError
from .logbook import Logbook
from .models import QSO
from .values import (
    DEFAULT_REPORT,
    Band,
    Frequency,
    Mode,
    format_number,
    parse_band,
    parse_callsign,
    parse_kilohertz,
    parse_mode,
    parse_number,
    parse_report,
)

logger = logging.getLogger(__name__)


class EntryField(Enum):
    CALLSIGN = "callsign"
    THEIR_REPORT = "their report"
    THEIR_NUMBER = "their number"
    THEIR_XCHANGE = "their xchange"
    MY_REPORT = "my report"
    MY_NUMBER = "my number"
    MY_XCHANGE = "my xchange"
    BAND = "band"
    MODE = "mode"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value


# The forward cycle; every other field leads back to CALLSIGN.
CANONICAL_ORDER = (
    EntryField.CALLSIGN,
    EntryField.THEIR_REPORT,
    EntryField.THEIR_NUMBER,
    EntryField.THEIR_XCHANGE,
)


def build_navigation(contest: Contest) -> Dict[EntryField, EntryField]:
    """Map each canonical field to the next enabled one for this contest."""
    enabled = {
        EntryField.CALLSIGN: True,
        EntryField.THEIR_REPORT: True,
        EntryField.THEIR_NUMBER: contest.enter_their_number,
        EntryField.THEIR_XCHANGE: contest.enter_their_xchange,
    }
    table = {}
    for i, field in enumerate(CANONICAL_ORDER):
        following = [f for f in CANONICAL_ORDER[i + 1 :] if enabled[f]]
        table[field] = following[0] if following else EntryField.CALLSIGN
    return table


@dataclass
class InputState:
    """The raw text of every entry field."""

    callsign: str = ""
    their_report: str = ""
    their_number: str = ""
    their_xchange: str = ""
    my_report: str = ""
    my_number: str = ""
    my_xchange: str = ""
    band: str = ""
    mode: str = ""


@dataclass(frozen=True)
class KeyerValues:
    """Snapshot of the values a keyer may put into its messages."""

    my_report: str
    my_number: str
    my_xchange: str
    their_call: str


class EntryView(Protocol):
    """The visual part of the QSO data entry."""

    def set_callsign(self, text: str) -> None: ...

    def set_their_report(self, text: str) -> None: ...

    def set_their_number(self, text: str) -> None: ...

    def set_their_xchange(self, text: str) -> None: ...

    def set_my_report(self, text: str) -> None: ...

    def set_my_number(self, text: str) -> None: ...

    def set_my_xchange(self, text: str) -> None: ...

    def set_band(self, text: str) -> None: ...

    def set_mode(self, text: str) -> None: ...

    def set_frequency(self, frequency: Frequency) -> None: ...

    def enable_exchange_fields(self, their_number: bool, their_xchange: bool) -> None: ...

    def set_active_field(self, field: EntryField) -> None: ...

    def set_duplicate_marker(self, duplicate: bool) -> None: ...

    def set_editing_marker(self, editing: bool) -> None: ...

    def show_message(self, message: str) -> None: ...

    def clear_message(self) -> None: ...


class VFO(Protocol):
    """The radio side: receives frequencies typed by the operator."""

    def set_frequency(self, frequency: Frequency) -> None: ...


class NullEntryView:
    def set_callsign(self, text: str) -> None:
        pass

    def set_their_report(self, text: str) -> None:
        pass

    def set_their_number(self, text: str) -> None:
        pass

    def set_their_xchange(self, text: str) -> None:
        pass

    def set_my_report(self, text: str) -> None:
        pass

    def set_my_number(self, text: str) -> None:
        pass

    def set_my_xchange(self, text: str) -> None:
        pass

    def set_band(self, text: str) -> None:
        pass

    def set_mode(self, text: str) -> None:
        pass

    def set_frequency(self, frequency: Frequency) -> None:
        pass

    def enable_exchange_fields(self, their_number: bool, their_xchange: bool) -> None:
        pass

    def set_active_field(self, field: EntryField) -> None:
        pass

    def set_duplicate_marker(self, duplicate: bool) -> None:
        pass

    def set_editing_marker(self, editing: bool) -> None:
        pass

    def show_message(self, message: str) -> None:
        pass

    def clear_message(self) -> None:
        pass


class NullVFO:
    def set_frequency(self, frequency: Frequency) -> None:
        pass


class EntryController:
    """Drives QSO entry against a logbook."""

    def __init__(self, clock: Clock, logbook: Logbook, contest: Optional[Contest] = None) -> None:
        self.clock = clock
        self.logbook = logbook
        self.contest = contest or Contest()
        self._navigation = build_navigation(self.contest)

        self.view: EntryView = NullEntryView()
        self.vfo: VFO = NullVFO()

        self.selected_band = logbook.last_band()
        if self.selected_band == Band.NO_BAND:
            self.selected_band = Band.BAND_160M
        self.selected_mode = logbook.last_mode()
        if self.selected_mode == Mode.NO_MODE:
            self.selected_mode = Mode.CW
        self.frequency: Frequency = 0.0

        # A fresh entry leaves their report blank; clear() pre-fills it.
        self.input = InputState(
            my_report=DEFAULT_REPORT,
            my_number=format_number(logbook.next_number()),
            band=self.selected_band.value,
            mode=self.selected_mode.value,
        )
        self.editing = False
        self.active_field = EntryField.CALLSIGN

    # Collaborators

    def set_view(self, view: Optional[EntryView]) -> None:
        if view is None:
            self.view = NullEntryView()
            return
        self.view = view
        self.view.enable_exchange_fields(self.contest.enter_their_number, self.contest.enter_their_xchange)
        self._show_input()
        self.view.set_active_field(self.active_field)
        self.view.set_editing_marker(self.editing)

    def set_vfo(self, vfo: Optional[VFO]) -> None:
        self.vfo = vfo or NullVFO()

    def contest_changed(self, contest: Contest) -> None:
        """Switch to new contest settings; the active field stays where it is."""
        self.contest = contest
        self._navigation = build_navigation(contest)
        self.view.enable_exchange_fields(contest.enter_their_number, contest.enter_their_xchange)

    # Navigation

    def get_active_field(self) -> EntryField:
        return self.active_field

    def set_active_field(self, field: EntryField) -> None:
        self.active_field = field
        self.view.set_active_field(field)

    def goto_next_field(self) -> EntryField:
        next_field = self._navigation.get(self.active_field, EntryField.CALLSIGN)
        self.set_active_field(next_field)
        return next_field

    # Input

    def enter(self, text: str) -> None:
        """Take the current text of the active field."""
        field = self.active_field
        if not self._field_enabled(field):
            logger.debug("ignoring input %r for disabled %s", text, field)
            return
        if field == EntryField.CALLSIGN:
            self.enter_callsign(text)
        elif field == EntryField.THEIR_REPORT:
            self.input.their_report = text
        elif field == EntryField.THEIR_NUMBER:
            self.input.their_number = text
        elif field == EntryField.THEIR_XCHANGE:
            self.input.their_xchange = text
        elif field == EntryField.MY_REPORT:
            self.input.my_report = text
        elif field == EntryField.MY_NUMBER:
            self.input.my_number = text
        elif field == EntryField.MY_XCHANGE:
            self.input.my_xchange = text
        elif field == EntryField.BAND:
            self.band_selected(text)
        elif field == EntryField.MODE:
            self.mode_selected(text)
        else:
            logger.debug("ignoring input %r for %s", text, field)

    def _field_enabled(self, field: EntryField) -> bool:
        if field == EntryField.THEIR_NUMBER:
            return self.contest.enter_their_number
        if field == EntryField.THEIR_XCHANGE:
            return self.contest.enter_their_xchange
        return True

    def enter_callsign(self, text: str) -> None:
        self.input.callsign = text
        self._show_duplicates()

    def band_selected(self, text: str) -> None:
        self.input.band = text
        try:
            self.selected_band = parse_band(text)
        except ParseError as e:
            logger.debug("keeping band %s: %s", self.selected_band, e)
            return
        if self.input.callsign:
            self._show_duplicates()

    def mode_selected(self, text: str) -> None:
        self.input.mode = text
        try:
            self.selected_mode = parse_mode(text)
        except ParseError as e:
            logger.debug("keeping mode %s: %s", self.selected_mode, e)
            return
        if self.input.callsign:
            self._show_duplicates()

    def set_frequency(self, frequency: Frequency) -> None:
        """Called by the VFO when the radio reports a new frequency."""
        self.frequency = frequency
        self.view.set_frequency(frequency)

    def _dupe_query(self):
        band = self.selected_band if self.contest.allow_multi_band else Band.NO_BAND
        mode = self.selected_mode if self.contest.allow_multi_mode else Mode.NO_MODE
        return band, mode

    def _show_duplicates(self) -> None:
        try:
            call = parse_callsign(self.input.callsign)
        except ParseError:
            self._show_my_number(self.logbook.next_number())
            self.view.set_duplicate_marker(False)
            self.view.clear_message()
            return

        self._show_my_number(self._resolve_number(call))
        dupes = self.logbook.find_duplicate_qsos(call, *self._dupe_query())
        if not dupes:
            self.view.set_duplicate_marker(False)
            self.view.clear_message()
            return

        self.view.set_duplicate_marker(True)
        self.view.show_message(_duplicate_message(call, dupes))

    def _show_my_number(self, number: int) -> None:
        # While editing the loaded number is kept.
        if self.editing:
            return
        text = format_number(number)
        if self.input.my_number != text:
            self.input.my_number = text
            self.view.set_my_number(text)

    def is_duplicate(self, call: str) -> bool:
        """Would a QSO with call on the selected band/mode be a dupe?"""
        return bool(self.logbook.find_duplicate_qsos(call, *self._dupe_query()))

    # Commit

    def log(self) -> Optional[QSO]:
        """Validate the input and append it to the logbook.

        Returns the logged QSO, or None if nothing was logged. Validation
        failures are shown in the view and focus the offending field.
        """
        frequency = parse_kilohertz(self.input.callsign)
        if frequency is not None:
            self._enter_frequency(frequency)
            return None

        try:
            qso = self._build_qso()
        except _EntryError as e:
            self._show_error(e.field, e.error)
            return None

        logged = self.logbook.log(qso)
        self.clear()
        return logged

    def _enter_frequency(self, frequency: Frequency) -> None:
        self.vfo.set_frequency(frequency)
        self.set_frequency(frequency)
        self.input.callsign = ""
        self.view.set_callsign("")

    def _build_qso(self) -> QSO:
        call = _check(EntryField.CALLSIGN, parse_callsign, self.input.callsign)
        their_report = _check(EntryField.THEIR_REPORT, parse_report, self.input.their_report)

        their_number = 0
        if self.input.their_number.strip():
            their_number = _check(EntryField.THEIR_NUMBER, parse_number, self.input.their_number)

        their_xchange = self.input.their_xchange.strip()
        if self.contest.require_their_xchange and not their_xchange:
            raise _EntryError(EntryField.THEIR_XCHANGE, MissingXchange("their exchange is missing"))

        my_report = _check(EntryField.MY_REPORT, parse_report, self.input.my_report)

        if self.editing:
            my_number = _check(EntryField.MY_NUMBER, parse_number, self.input.my_number)
        else:
            my_number = self._resolve_number(call)
            if my_number != self.logbook.next_number():
                logger.info("re-logging QSO #%s with %s", format_number(my_number), call)

        return QSO(
            call=call,
            time=self.clock.now(),
            band=self.selected_band,
            mode=self.selected_mode,
            their_report=their_report,
            their_number=their_number,
            their_xchange=their_xchange,
            my_report=my_report,
            my_number=my_number,
            my_xchange=self.input.my_xchange.strip(),
        )

    def _resolve_number(self, call: str) -> int:
        """Reuse the number of an exact (call, band, mode) match, else allocate one."""
        for dupe in self.logbook.find_duplicate_qsos(call, self.selected_band, self.selected_mode):
            if dupe.band == self.selected_band and dupe.mode == self.selected_mode:
                return dupe.my_number
        return self.logbook.next_number()

    def _show_error(self, field: EntryField, error: Exception) -> None:
        logger.debug("cannot log QSO, %s: %s", field, error)
        self.set_active_field(field)
        self.view.show_message(str(error))

    # Reset and editing

    def clear(self) -> None:
        """Discard the current input and start a new QSO on the selected band/mode."""
        self.editing = False
        self.input = replace(
            InputState(),
            their_report=DEFAULT_REPORT,
            my_report=DEFAULT_REPORT,
            my_number=format_number(self.logbook.next_number()),
            band=self.selected_band.value,
            mode=self.selected_mode.value,
        )
        self.active_field = EntryField.CALLSIGN

        self._show_input()
        self.view.set_active_field(self.active_field)
        self.view.set_duplicate_marker(False)
        self.view.set_editing_marker(False)
        self.view.clear_message()

        self.logbook.select_last_qso()

    def qso_selected(self, qso: QSO) -> None:
        """Load a logged QSO for editing."""
        logger.debug("editing QSO #%s", format_number(qso.my_number))
        self.editing = True
        self.selected_band = qso.band
        self.selected_mode = qso.mode
        self.input = InputState(
            callsign=qso.call,
            their_report=qso.their_report,
            their_number=format_number(qso.their_number) if qso.their_number else "",
            their_xchange=qso.their_xchange,
            my_report=qso.my_report,
            my_number=format_number(qso.my_number),
            my_xchange=qso.my_xchange,
            band=qso.band.value,
            mode=qso.mode.value,
        )
        self._show_input()
        self.set_active_field(EntryField.CALLSIGN)
        self.view.set_editing_marker(True)

    def edit(self, my_number: int) -> Optional[QSO]:
        """Load the latest version of QSO number my_number for editing."""
        for qso in reversed(self.logbook.qsos):
            if qso.my_number == my_number:
                self.logbook.select_qso(qso)
                self.qso_selected(qso)
                return qso
        self.view.show_message(f"QSO #{format_number(my_number)} not found")
        return None

    def current_values(self) -> KeyerValues:
        return KeyerValues(
            my_report=self.input.my_report,
            my_number=self.input.my_number,
            my_xchange=self.input.my_xchange,
            their_call=self.input.callsign,
        )

    def _show_input(self) -> None:
        self.view.set_callsign(self.input.callsign)
        self.view.set_their_report(self.input.their_report)
        self.view.set_their_number(self.input.their_number)
        self.view.set_their_xchange(self.input.their_xchange)
        self.view.set_my_report(self.input.my_report)
        self.view.set_my_number(self.input.my_number)
        self.view.set_my_xchange(self.input.my_xchange)
        self.view.set_band(self.input.band)
        self.view.set_mode(self.input.mode)
        self.view.set_frequency(self.frequency)


class _EntryError(Exception):
    """Carries a parse or validation error together with the field it belongs to."""

    def __init__(self, field: EntryField, error: Exception) -> None:
        super().__init__(str(error))
        self.field = field
        self.error = error


def _check(field, parse, text):
    try:
        return parse(text)
    except (ParseError, ValidationError) as e:
        raise _EntryError(field, e) from e


def _duplicate_message(call: str, dupes: List[QSO]) -> str:
    worked = ", ".join(f"#{format_number(q.my_number)} {q.band} {q.mode}".rstrip() for q in dupes)
    return f"{call} was worked before: {worked}"
