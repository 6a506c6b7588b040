from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(debug: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Attach stderr (and optionally file) handlers to the package logger.

    stdout carries the tools' reports, so nothing logged here may reach it.
    Calling this again replaces the handlers from the previous call.
    """
    logger = logging.getLogger("slack_diag")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.debug("Logging initialized. debug=%s log_file=%s", debug, log_file)
    return logger
