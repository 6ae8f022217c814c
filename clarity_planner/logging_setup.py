from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "clarity_planner"


def setup_logging(level: int = logging.WARNING, log_file: Optional[Path] = None) -> None:
    """Attach stderr (and optionally file) handlers to the package logger.

    Safe to call more than once; earlier handlers are replaced.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
        logger.setLevel(min(level, logging.DEBUG))
