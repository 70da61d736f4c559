"""Search-and-Pounce vs Run operating mode."""

from __future__ import annotations

from enum import Enum
from typing import Callable

from .events import Listeners


class Workmode(str, Enum):
    SEARCH_POUNCE = "S&P"
    RUN = "RUN"

    def __str__(self) -> str:
        return self.value


class WorkmodeController:
    """Holds the current workmode and tells listeners when it changes."""

    def __init__(self, workmode: Workmode = Workmode.SEARCH_POUNCE) -> None:
        self._workmode = workmode
        self._changed: Listeners[Workmode] = Listeners("workmode changed")

    @property
    def workmode(self) -> Workmode:
        return self._workmode

    def set_workmode(self, workmode: Workmode) -> None:
        if workmode == self._workmode:
            return
        self._workmode = workmode
        self._changed.emit(workmode)

    def toggle(self) -> Workmode:
        if self._workmode == Workmode.RUN:
            self.set_workmode(Workmode.SEARCH_POUNCE)
        else:
            self.set_workmode(Workmode.RUN)
        return self._workmode

    def on_workmode_changed(self, listener: Callable[[Workmode], object]) -> None:
        self._changed.add(listener)
