"""Command-line interface for the contest logger.

Commands cover initializing a log file, the interactive QSO entry session,
listing the log, duplicate lookups, copying the log to a new file, and
showing the effective settings.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Allow running this file directly by ensuring the project root is on sys.path
if __package__ is None or __package__ == "":
    sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from contest_logger.clock import SystemClock
from contest_logger.config import APP_NAME, Settings, config_path, load_settings
from contest_logger.console import ConsoleEntryView, ConsoleLogbookView, ConsoleVFO, qso_table
from contest_logger.entry import EntryController, EntryField
from contest_logger.errors import ParseError
from contest_logger.logbook import Logbook
from contest_logger.storage import QSOStore
from contest_logger.values import Band, Mode, format_number, parse_band, parse_callsign, parse_kilohertz, parse_mode
from contest_logger.workmode import Workmode, WorkmodeController

app = typer.Typer(add_completion=False, help=f"{APP_NAME} - contest QSO entry")
console = Console()

DB_HELP = "SQLite log file (default: user data dir or CONTEST_LOGGER_DB_PATH)"
CONFIG_HELP = "Settings JSON file (default: user config dir or CONTEST_LOGGER_CONFIG)"

SESSION_HELP = """\
Type a value and press Enter to fill the active field and move on.
An empty line logs the QSO. Commands start with ':'
  :log :next :clear :list :help :quit
  :band 40m   :mode CW   :freq 7028   :edit 12   :select 12
  :my report 599   :my number 012   :my xchange DL
  :field callsign|their report|their number|their xchange
  :run   :sp"""

MY_FIELDS = {
    "report": EntryField.MY_REPORT,
    "number": EntryField.MY_NUMBER,
    "xchange": EntryField.MY_XCHANGE,
}


# Utilities

def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug)],
    )


def _open_logbook(store: QSOStore) -> Logbook:
    """Load the logbook from the store, creating an empty log file if needed.

    Raises typer.Exit when an existing file cannot be read.
    """
    clock = SystemClock()
    if not store.exists():
        store.create()
        return Logbook(clock)
    try:
        return Logbook.load(clock, store)
    except RuntimeError as e:
        console.print(f"[red]Error loading log: {e}[/red]")
        raise typer.Exit(1) from e


class EntrySession:
    """Wires an entry controller, a logbook and a store to the console."""

    def __init__(self, logbook: Logbook, store: Optional[QSOStore], settings: Settings, out: Console) -> None:
        self.console = out
        self.logbook = logbook
        self.workmode = WorkmodeController()
        self.entry_view = ConsoleEntryView(out)
        self.log_view = ConsoleLogbookView(out)

        if store is not None:
            self.logbook.on_row_added(store.write)
        self.controller = EntryController(logbook.clock, logbook, settings.contest)
        self.logbook.on_row_selected(self.controller.qso_selected)
        self.logbook.set_view(self.log_view)
        self.controller.set_view(self.entry_view)
        self.controller.set_vfo(ConsoleVFO(out))
        self.workmode.on_workmode_changed(lambda mode: out.print(f"Workmode: {mode}"))
        self.controller.clear()

    def handle(self, line: str) -> bool:
        """Process one line of input; returns False when the session should end."""
        text = line.strip()
        if not text:
            self.controller.log()
            return True
        if text.startswith(":"):
            return self._command(text[1:].strip())
        self.controller.enter(text)
        self.controller.goto_next_field()
        return True

    def _command(self, text: str) -> bool:
        name, _, arg = text.partition(" ")
        name = name.lower()
        arg = arg.strip()
        c = self.controller
        if name in ("q", "quit", "exit"):
            return False
        if name in ("l", "log"):
            c.log()
        elif name in ("n", "next"):
            c.goto_next_field()
        elif name in ("c", "clear"):
            c.clear()
        elif name == "list":
            self.log_view.show()
        elif name == "band":
            c.band_selected(arg)
        elif name == "mode":
            c.mode_selected(arg)
        elif name == "freq":
            frequency = parse_kilohertz(arg)
            if frequency is None:
                self.console.print(f"[red]Not a frequency: {escape(arg)}[/red]")
            else:
                c.set_frequency(frequency)
        elif name == "edit" and arg.isdigit():
            c.edit(int(arg))
        elif name == "select" and arg.isdigit():
            self.select(int(arg))
        elif name == "my":
            which, _, value = arg.partition(" ")
            field = MY_FIELDS.get(which.lower())
            if field is None:
                self.console.print("[red]Use :my report|number|xchange VALUE[/red]")
            else:
                c.set_active_field(field)
                c.enter(value.strip())
                c.goto_next_field()
        elif name == "field":
            try:
                c.set_active_field(EntryField(arg.lower()))
            except ValueError:
                self.console.print(f"[red]Unknown field: {escape(arg)}[/red]")
        elif name == "run":
            self.workmode.set_workmode(Workmode.RUN)
        elif name == "sp":
            self.workmode.set_workmode(Workmode.SEARCH_POUNCE)
        elif name in ("h", "help"):
            self.console.print(SESSION_HELP)
        else:
            self.console.print(f"[red]Unknown command: {escape(text)}[/red] (:help)")
        return True

    def select(self, my_number: int) -> None:
        """Pick the row of QSO my_number in the list, as a user would."""
        index = self.logbook.index_of(my_number)
        if index is None:
            self.console.print(f"[red]QSO #{format_number(my_number)} not found[/red]")
            return
        self.log_view.select_row(index)
        self.logbook.select(index)

    def run(self) -> None:
        self.console.print(SESSION_HELP)
        while True:
            self.entry_view.render()
            try:
                line = self.console.input(self.entry_view.prompt())
            except (EOFError, KeyboardInterrupt):
                break
            if not self.handle(line):
                break
        if self.logbook.failed_writes:
            self.console.print(
                f"[red]{len(self.logbook.failed_writes)} QSOs could not be written to the log file[/red]"
            )


@app.callback()
def main_options(debug: bool = typer.Option(False, "--debug", help="Verbose logging")) -> None:
    """Contest QSO entry with duplicate checking."""
    _setup_logging(debug)


@app.command()
def init(db: Optional[Path] = typer.Option(None, "--db", help=DB_HELP)) -> None:
    """Create an empty log file (or make sure an existing one is usable)."""
    try:
        store = QSOStore(db)
        path = store.create()
        console.print(f"Log ready at: [bold]{path}[/bold] ({store.count()} rows)")
    except Exception as e:
        console.print(f"[red]Error initializing log: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def entry(
    db: Optional[Path] = typer.Option(None, "--db", help=DB_HELP),
    config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP),
) -> None:
    """Run the interactive QSO entry session."""
    store = QSOStore(db)
    try:
        logbook = _open_logbook(store)
    except RuntimeError as e:
        console.print(f"[red]Error opening log: {e}[/red]")
        raise typer.Exit(1) from e
    EntrySession(logbook, store, load_settings(config), console).run()


@app.command("list")
def list_cmd(
    db: Optional[Path] = typer.Option(None, "--db", help=DB_HELP),
    history: bool = typer.Option(False, help="Include superseded edits"),
    limit: int = typer.Option(0, min=0, help="Show only the last N rows (0 = all)"),
) -> None:
    """Display the log ordered by QSO number."""
    store = QSOStore(db)
    try:
        logbook = Logbook.load(SystemClock(), store)
    except RuntimeError as e:
        console.print(f"[red]Error listing QSOs: {e}[/red]")
        raise typer.Exit(1) from e
    if history:
        rows = logbook.qsos_ordered_by_my_number()
    else:
        rows = logbook.unique_qsos_ordered_by_my_number()
    if limit:
        rows = rows[-limit:]
    if not rows:
        console.print("No QSOs found.")
        return
    console.print(qso_table(rows, title=f"QSOs ({store.path})"))


@app.command()
def dupes(
    call: str = typer.Argument(..., help="Callsign to check"),
    band: Optional[str] = typer.Option(None, help="Band, e.g. 40m (default: any)"),
    mode: Optional[str] = typer.Option(None, help="Mode, e.g. CW (default: any)"),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """Show earlier QSOs that make a contact with CALL a dupe."""
    try:
        callsign = parse_callsign(call)
        b = parse_band(band) if band else Band.NO_BAND
        m = parse_mode(mode) if mode else Mode.NO_MODE
    except ParseError as e:
        raise typer.BadParameter(str(e)) from e
    try:
        logbook = Logbook.load(SystemClock(), QSOStore(db))
    except RuntimeError as e:
        console.print(f"[red]Error checking dupes: {e}[/red]")
        raise typer.Exit(1) from e
    found = logbook.find_duplicate_qsos(callsign, b, m)
    if not found:
        console.print(f"{callsign} is not a dupe.")
        return
    console.print(qso_table(found, title=f"{callsign} worked {len(found)}x"))


@app.command("save-as")
def save_as(
    dest: Path = typer.Argument(..., dir_okay=False, help="New SQLite log file"),
    db: Optional[Path] = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """Copy the complete log history into a new file."""
    try:
        logbook = Logbook.load(SystemClock(), QSOStore(db))
        target = QSOStore(dest)
        target.clear()
        logbook.write_all(target)
        console.print(f"Saved {len(logbook)} rows to {dest} (next QSO #{format_number(logbook.next_number())})")
    except RuntimeError as e:
        console.print(f"[red]Error saving log: {e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def settings(config: Optional[Path] = typer.Option(None, "--config", help=CONFIG_HELP)) -> None:
    """Print the effective station and contest settings."""
    s = load_settings(config)
    table = Table(title=f"Settings ({config or config_path()})")
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("Station callsign", s.station.callsign or "-")
    for name, value in vars(s.contest).items():
        table.add_row(name.replace("_", " "), "yes" if value else "no")
    console.print(table)


def main() -> None:  # pragma: no cover - exercised via CLI
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
