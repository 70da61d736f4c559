"""Terminal views for the entry controller and the logbook, rendered with rich."""

from __future__ import annotations

from typing import Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .entry import EntryField
from .models import QSO
from .values import Frequency, format_number

FIELD_ORDER = (
    EntryField.CALLSIGN,
    EntryField.THEIR_REPORT,
    EntryField.THEIR_NUMBER,
    EntryField.THEIR_XCHANGE,
    EntryField.MY_REPORT,
    EntryField.MY_NUMBER,
    EntryField.MY_XCHANGE,
    EntryField.BAND,
    EntryField.MODE,
)


def qso_table(qsos: List[QSO], title: str, selected: Optional[int] = None) -> Table:
    """Build a rich table of QSOs; the selected row index is highlighted."""
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("UTC")
    table.add_column("Call")
    table.add_column("Band")
    table.add_column("Mode")
    table.add_column("My RST")
    table.add_column("My Xchg")
    table.add_column("Their RST")
    table.add_column("Their #", justify="right")
    table.add_column("Their Xchg")
    for i, q in enumerate(qsos):
        table.add_row(
            format_number(q.my_number),
            q.time.strftime("%Y-%m-%d %H:%M"),
            escape(q.call),
            str(q.band),
            str(q.mode),
            q.my_report,
            escape(q.my_xchange),
            q.their_report,
            format_number(q.their_number) if q.their_number else "",
            escape(q.their_xchange),
            style="reverse" if i == selected else None,
        )
    return table


class ConsoleEntryView:
    """Keeps the displayed text of each field and prints it on demand."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.fields: Dict[EntryField, str] = {field: "" for field in FIELD_ORDER}
        self.enabled: Dict[EntryField, bool] = {field: True for field in FIELD_ORDER}
        self.active_field = EntryField.CALLSIGN
        self.frequency: Frequency = 0.0
        self.duplicate = False
        self.editing = False
        self.message = ""

    def set_callsign(self, text: str) -> None:
        self.fields[EntryField.CALLSIGN] = text

    def set_their_report(self, text: str) -> None:
        self.fields[EntryField.THEIR_REPORT] = text

    def set_their_number(self, text: str) -> None:
        self.fields[EntryField.THEIR_NUMBER] = text

    def set_their_xchange(self, text: str) -> None:
        self.fields[EntryField.THEIR_XCHANGE] = text

    def set_my_report(self, text: str) -> None:
        self.fields[EntryField.MY_REPORT] = text

    def set_my_number(self, text: str) -> None:
        self.fields[EntryField.MY_NUMBER] = text

    def set_my_xchange(self, text: str) -> None:
        self.fields[EntryField.MY_XCHANGE] = text

    def set_band(self, text: str) -> None:
        self.fields[EntryField.BAND] = text

    def set_mode(self, text: str) -> None:
        self.fields[EntryField.MODE] = text

    def set_frequency(self, frequency: Frequency) -> None:
        self.frequency = frequency

    def enable_exchange_fields(self, their_number: bool, their_xchange: bool) -> None:
        self.enabled[EntryField.THEIR_NUMBER] = their_number
        self.enabled[EntryField.THEIR_XCHANGE] = their_xchange

    def set_active_field(self, field: EntryField) -> None:
        self.active_field = field

    def set_duplicate_marker(self, duplicate: bool) -> None:
        self.duplicate = duplicate

    def set_editing_marker(self, editing: bool) -> None:
        self.editing = editing

    def show_message(self, message: str) -> None:
        self.message = message
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def clear_message(self) -> None:
        self.message = ""

    def render(self) -> None:
        """Print one status line with every enabled field."""
        parts = []
        for field in FIELD_ORDER:
            if not self.enabled[field]:
                continue
            text = escape(self.fields[field]) or "-"
            if field == self.active_field:
                parts.append(f"[bold reverse]{field}: {text}[/bold reverse]")
            else:
                parts.append(f"{field}: {text}")
        if self.frequency:
            parts.append(f"{self.frequency / 1000:.1f} kHz")
        if self.duplicate:
            parts.append("[red]DUPE[/red]")
        if self.editing:
            parts.append("[cyan]EDIT[/cyan]")
        self.console.print(" | ".join(parts))

    def prompt(self) -> str:
        return f"{self.active_field}> "


class ConsoleLogbookView:
    """Prints rows as they are added and tracks the selected row."""

    def __init__(self, console: Console) -> None:
        self.console = console
        self.rows: List[QSO] = []
        self.selected: Optional[int] = None

    def update_all_rows(self, qsos: List[QSO]) -> None:
        self.rows = list(qsos)
        self.console.print(f"{len(self.rows)} QSOs in the log")

    def row_added(self, qso: QSO) -> None:
        self.rows.append(qso)
        self.console.print(f"[green]Logged[/green] {escape(str(qso))}")

    def select_row(self, index: int) -> None:
        self.selected = index

    def show(self, last: int = 10) -> None:
        start = max(0, len(self.rows) - last)
        selected = self.selected - start if self.selected is not None else None
        self.console.print(qso_table(self.rows[start:], title="Last QSOs", selected=selected))


class ConsoleVFO:
    """Stands in for the radio: reports frequencies handed to it."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def set_frequency(self, frequency: Frequency) -> None:
        self.console.print(f"VFO -> {frequency / 1000:.1f} kHz")
