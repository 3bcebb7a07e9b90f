"""Logging for Stencil.

All module loggers live under the ``stencil`` package logger, which owns the
handlers: a Rich console handler (INFO and up) and, once
``setup_file_logging()`` has run, a plain-text file handler. Module loggers
stay at ``NOTSET`` so the package logger's level decides what is recorded.
"""
import logging
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

PACKAGE_LOGGER = "stencil"

LOG_DIR = Path.home() / ".cache" / "stencil"
LOG_FILE = LOG_DIR / "stencil.log"

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_file_logging_configured = False


def _package_logger() -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Send Stencil log records to a file.

    With ``verbose`` the package logger drops to DEBUG, so merge decisions
    and per-action steps reach the file. The console keeps showing INFO and
    up either way.

    Args:
        log_file: Path to log file (defaults to ~/.cache/stencil/stencil.log)
        verbose: Record debug messages in the file

    Returns:
        The file actually written to; the temp directory is used when the
        requested folder cannot be created.
    """
    global _file_logging_configured

    package_logger = _package_logger()
    target_log_file = Path(log_file) if log_file else LOG_FILE

    if _file_logging_configured:
        return target_log_file

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target_log_file = Path(tempfile.gettempdir()) / "stencil.log"

    level = logging.DEBUG if verbose else logging.INFO
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    package_logger.addHandler(file_handler)
    package_logger.setLevel(level)

    _file_logging_configured = True

    package_logger.info(f"Stencil logging initialized: {target_log_file}")
    return target_log_file


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (typically ``__name__``).

    Names outside the ``stencil`` namespace get no handlers of their own.
    """
    _package_logger()
    return logging.getLogger(name)
