"""Logging setup for the interactive shell."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from .config import Settings

_configured = False

NOISY_LOGGERS = ("urllib3", "requests")


def configure_logging(settings: Settings) -> None:
    """Send detailed records to a rotating file and only warnings to stderr.

    Safe to call more than once; only the first call installs handlers.
    """
    global _configured
    if _configured:
        return

    level = getattr(logging, settings.log_level, logging.INFO)
    root = logging.getLogger("casecoach")
    root.setLevel(level)
    root.propagate = False

    detailed = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.log_path,
            maxBytes=1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"Could not open log file {settings.log_path}: {exc}", file=sys.stderr)
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed)
        root.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    root.debug("Logging configured at %s, file %s", settings.log_level, settings.log_path)
