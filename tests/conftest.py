"""Shared test fixtures for fwgate tests."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from fwgate.supervisor import DaemonSpec

DaemonFactory = Callable[..., DaemonSpec]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def log_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default log directory at a temporary path."""
    path = tmp_path / "logs"
    monkeypatch.setenv("FWGATE_LOG_DIR", str(path))
    monkeypatch.delenv("FWGATE_DEBUG", raising=False)
    monkeypatch.delenv("FWGATE_LOG_LEVEL", raising=False)
    return path


@pytest.fixture
def python_daemon() -> DaemonFactory:
    """Return a factory for specs that run a Python snippet as the daemon."""

    def _factory(name: str, code: str, **kwargs: object) -> DaemonSpec:
        return DaemonSpec(
            name=name,
            command=(sys.executable, "-c", code),
            **kwargs,  # pyright: ignore[reportArgumentType]
        )

    return _factory


@pytest.fixture
def console() -> Console:
    return Console(
        width=100,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
        record=True,
    )
