"""Central logging setup.

Modules log through ``logging.getLogger(__name__)``; applications call
:func:`configure_logging` once at start-up. Console output is always on,
a rotating file handler is added when a path is given.
"""
from __future__ import annotations
import logging
import logging.handlers
from pathlib import Path

CONSOLE_FORMAT = "[%(levelname)s] %(asctime)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(funcName)s | %(message)s"

_ROOT = "neuroguard"


def configure_logging(level: str | int = "INFO", log_file: str | Path | None = None) -> logging.Logger:
    """Attach handlers to the package logger once and return it.

    Args:
        level: Level name or number for the console handler.
        log_file: Optional path for a rotating DEBUG-level log file.
    Returns:
        The ``neuroguard`` package logger.
    """
    logger = logging.getLogger(_ROOT)
    if getattr(logger, "_neuroguard_configured", False):
        logger.setLevel(min(logger.level, _to_level(level)))
        return logger

    logger.setLevel(logging.DEBUG if log_file else _to_level(level))

    console = logging.StreamHandler()
    console.setLevel(_to_level(level))
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=3 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)

    logger.propagate = False
    logger._neuroguard_configured = True
    return logger


def _to_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else logging.INFO
