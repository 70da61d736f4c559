"""Persistence layer: a SQLite file holding the QSO rows of one logbook.

`QSOStore` implements the store contract the logbook consumes: read every
row back in the order it was written, write one row, clear all rows. Rows
are never updated in place; an edit arrives as another row.

The database lives in the user's data directory by default, and can be
overridden via the CONTEST_LOGGER_DB_PATH environment variable. SQLModel /
SQLAlchemy 2.x are used for ORM-style access.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

from platformdirs import user_data_dir
from sqlmodel import Session, SQLModel, create_engine, select

from .config import APP_NAME
from .models import QSO, QSORecord

DB_ENV_VAR = "CONTEST_LOGGER_DB_PATH"


def _default_db_path() -> Path:
    """Return the default location of the SQLite database file."""
    data_dir = Path(user_data_dir(appname=APP_NAME, appauthor=False))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "current.sqlite3"


def get_db_path() -> Path:
    """Resolve the active database path, honoring CONTEST_LOGGER_DB_PATH if set."""
    env = os.getenv(DB_ENV_VAR)
    if env:
        p = Path(env).expanduser()
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    return _default_db_path()


class QSOStore:
    """Reads and writes the QSO rows of one SQLite log file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else get_db_path()
        self._engine = None

    def __repr__(self) -> str:
        return f"QSOStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.exists()

    def engine(self):
        """Create (once) and return the SQLAlchemy engine bound to the file.

        Raises RuntimeError if the engine cannot be created.
        """
        if self._engine is None:
            try:
                self._engine = create_engine(f"sqlite:///{self.path}", echo=False)
            except Exception as e:
                raise RuntimeError(f"Failed to create database engine: {e}") from e
        return self._engine

    def create(self) -> Path:
        """Create the QSO table if it doesn't exist yet.

        Raises RuntimeError if table creation fails.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            SQLModel.metadata.create_all(self.engine())
            return self.path
        except Exception as e:
            raise RuntimeError(f"Failed to create database tables: {e}") from e

    @contextmanager
    def session_scope(self):
        """Context manager yielding a SQLModel Session bound to our engine.

        Automatically handles session cleanup and rollback on errors.
        """
        session = None
        try:
            session = Session(self.engine())
            yield session
        except Exception:
            if session:
                session.rollback()
            raise
        finally:
            if session:
                session.close()

    def read_all(self) -> List[QSO]:
        """Return all QSOs in the order they were written.

        Raises RuntimeError if the file is missing or cannot be read.
        """
        if not self.exists():
            raise RuntimeError(f"Failed to read QSOs: {self.path} does not exist")
        try:
            with self.session_scope() as session:
                stmt = select(QSORecord).order_by(QSORecord.id)
                return [record.to_qso() for record in session.exec(stmt)]
        except Exception as e:
            raise RuntimeError(f"Failed to read QSOs from {self.path}: {e}") from e

    def write(self, qso: QSO) -> None:
        """Append one QSO row.

        Raises RuntimeError if the QSO cannot be saved.
        """
        try:
            with self.session_scope() as session:
                session.add(QSORecord.from_qso(qso))
                session.commit()
        except Exception as e:
            raise RuntimeError(f"Failed to save QSO: {e}") from e

    def clear(self) -> None:
        """Remove every row, creating an empty log if the file is new.

        Raises RuntimeError if the rows cannot be removed.
        """
        self.create()
        try:
            with self.session_scope() as session:
                for record in session.exec(select(QSORecord)).all():
                    session.delete(record)
                session.commit()
        except Exception as e:
            raise RuntimeError(f"Failed to clear {self.path}: {e}") from e

    def count(self) -> int:
        try:
            with self.session_scope() as session:
                return len(session.exec(select(QSORecord.id)).all())
        except Exception as e:
            raise RuntimeError(f"Failed to count QSOs: {e}") from e
