"""Logging setup for the repairfit logger hierarchy."""

from __future__ import annotations

import logging
from pathlib import Path

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """
    Attach handlers to the ``repairfit`` logger.

    Safe to call more than once: a console handler (and a file handler per
    distinct log file) is only added if not already present.
    """
    root = logging.getLogger("repairfit")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(type(h) is logging.StreamHandler for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(console)

    if log_file is not None:
        target = str(Path(log_file).expanduser().resolve())
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in root.handlers
        ):
            file_handler = logging.FileHandler(target)
            file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            root.addHandler(file_handler)

    return root
