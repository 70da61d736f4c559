"""Data models used by the contest logger.

QSO is the validated value model the entry controller and the logbook pass
around. QSORecord extends it into the SQLModel table the store persists;
it only adds the surrogate key that keeps the rows in append order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import DateTime, Field, SQLModel

from .values import Band, Mode, format_number


class QSO(SQLModel):
    """A single logged contact.

    Attributes
    - call: Worked station's callsign, uppercased.
    - time: UTC time of the contact (naive UTC).
    - band/mode: Resolved band and mode of the contact.
    - their_report/their_number/their_xchange: What the other station sent.
    - my_report/my_number/my_xchange: What we sent. my_number is the QSO
      number and may be shared by several rows when a contact was edited.
    - log_timestamp: When this row was committed to the logbook; distinct
      from the contact time and used to pick the latest edit.
    """

    call: str = Field(index=True, description="Station callsign")
    time: datetime = Field(description="QSO time (UTC)", sa_type=DateTime(timezone=False))

    band: Band = Field(default=Band.NO_BAND, index=True)
    mode: Mode = Field(default=Mode.NO_MODE, index=True)

    their_report: str = ""
    their_number: int = 0
    their_xchange: str = ""

    my_report: str = ""
    my_number: int = Field(default=0, index=True)
    my_xchange: str = ""

    log_timestamp: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=False))

    def __str__(self) -> str:
        return (
            f"#{format_number(self.my_number)} {self.time:%H:%M} {self.call} "
            f"{self.band} {self.mode} {self.my_report} {self.their_report} "
            f"{self.their_xchange}".rstrip()
        )


class QSORecord(QSO, table=True):
    """A QSO row in the SQLite store."""

    __tablename__ = "qso"

    id: Optional[int] = Field(default=None, primary_key=True)

    @classmethod
    def from_qso(cls, qso: QSO) -> "QSORecord":
        return cls.model_validate(qso.model_dump())

    def to_qso(self) -> QSO:
        return QSO.model_validate(self.model_dump(exclude={"id"}))
