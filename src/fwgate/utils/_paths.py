from os import getenv
from pathlib import Path


def get_fwgate_dir() -> Path:
    """Get the path to the .fwgate/ state directory in the working directory."""
    return Path.cwd() / ".fwgate"


def get_fwgate_log_dir() -> Path:
    """Get the log directory, honouring FWGATE_LOG_DIR."""
    override = getenv("FWGATE_LOG_DIR")
    if override:
        return Path(override)
    return get_fwgate_dir() / "logs"


def get_supervisor_log_file() -> Path:
    """Get the path to the supervisor log file inside the log directory."""
    return get_fwgate_log_dir() / "supervisor.log"


def get_cli_log_file() -> Path:
    """Get the path to the CLI log file inside the log directory."""
    return get_fwgate_log_dir() / "cli.log"
