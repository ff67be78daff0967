"""fwgate CLI commands."""
# pyright: reportUnusedCallResult=false

from __future__ import annotations

from typing import TYPE_CHECKING

from ._shared import ExitCode, exit_with_error, get_error_console
from ._start import app as start_app

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "ExitCode",
    "exit_with_error",
    "get_error_console",
    "register_commands",
]


def register_commands(app: App) -> None:
    """Attach every command to the given application."""
    app.command(start_app)
