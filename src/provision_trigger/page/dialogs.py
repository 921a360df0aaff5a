"""Blocking dialogs shown to the user."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.panel import Panel


@runtime_checkable
class Dialogs(Protocol):
    """Host-page modal dialogs."""

    def alert(self, message: str) -> None:
        """Show *message* and block until acknowledged."""
        ...


class ConsoleDialogs:
    """Renders alerts on a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)

    def alert(self, message: str) -> None:
        self._console.print(Panel(message, title="Alert", border_style="red"))
