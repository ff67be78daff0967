from pathlib import Path

import pytest

from fwgate.utils import (
    get_cli_log_file,
    get_fwgate_dir,
    get_fwgate_log_dir,
    get_supervisor_log_file,
)


class TestLogPaths:
    def test_log_dir_env_override(self, log_dir: Path) -> None:
        assert get_fwgate_log_dir() == log_dir
        assert get_supervisor_log_file() == log_dir / "supervisor.log"
        assert get_cli_log_file() == log_dir / "cli.log"

    def test_default_log_dir_is_under_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("FWGATE_LOG_DIR")
        monkeypatch.chdir(tmp_path)

        assert get_fwgate_dir() == tmp_path / ".fwgate"
        assert get_fwgate_log_dir() == tmp_path / ".fwgate" / "logs"
