"""The command-line interface for fwgate."""

from ._app import app, create_app, main

__all__ = ["app", "create_app", "main"]
