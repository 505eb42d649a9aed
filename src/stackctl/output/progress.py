"""Spinner progress reporting on stderr.

:class:`SpinnerProgress` satisfies the service-layer ``Progress`` protocol
with a Rich status spinner. stdout is never touched, so piped template
output stays clean.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from stackctl.output.console import STACKCTL_THEME

if TYPE_CHECKING:
    from rich.status import Status


class SpinnerProgress:
    """Show a spinner between ``start`` and ``stop``, then print the final line."""

    def __init__(self, console: Console | None = None, *, enabled: bool = True) -> None:
        self._console = console or Console(stderr=True, theme=STACKCTL_THEME, highlight=False)
        self._enabled = enabled
        self._status: Status | None = None

    def start(self, message: str) -> None:
        if not self._enabled:
            return
        self._status = self._console.status(message)
        self._status.start()

    def stop(self, message: str) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
        if self._enabled:
            self._console.print(Text(message), soft_wrap=True)


class NullProgress:
    """Progress sink that records nothing; used for ``--quiet`` and ``--json``."""

    def start(self, message: str) -> None:
        pass

    def stop(self, message: str) -> None:
        pass
