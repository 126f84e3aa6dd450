"""Centralized logging configuration for Hunt Radar.

Every module logs under the ``hunt`` hierarchy (``hunt.producthunt``,
``hunt.timeframe``, ...). ``setup_logging`` owns the handlers on the
``hunt`` logger; per-module levels come from the ``logging.modules``
section of config.yaml via ``set_module_levels``.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

ROOT_LOGGER = "hunt"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level(name: str, fallback: int = logging.INFO) -> int:
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else fallback


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    module_levels: Optional[Mapping[str, str]] = None,
) -> logging.Logger:
    """Configure the ``hunt`` logger.

    HUNT_LOG_LEVEL, when set, wins over ``level``. Output goes to stderr so
    table and JSON output on stdout stays clean.

    Returns:
        The ``hunt`` logger.
    """
    level = os.environ.get("HUNT_LOG_LEVEL", level)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(_level(level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if module_levels:
        set_module_levels(module_levels)
    return logger


def set_module_levels(levels: Mapping[str, str]) -> dict[str, int]:
    """Set levels on ``hunt.*`` child loggers, e.g. ``{"producthunt": "DEBUG"}``.

    Unknown level names are skipped with a warning. Returns the levels applied.
    """
    applied = {}
    for name, level in (levels or {}).items():
        value = logging.getLevelName(str(level).upper())
        if not isinstance(value, int):
            get_logger("logging").warning("Unknown log level %r for %s", level, name)
            continue
        logger = get_logger(name)
        logger.setLevel(value)
        applied[logger.name] = value
    return applied


def setup_from_config(
    config: dict, level: Optional[str] = None, default: str = "INFO"
) -> logging.Logger:
    """Apply the ``logging`` section of a loaded config.

    ``level`` (e.g. from a --log-level flag) overrides ``logging.level``.
    """
    cfg = config.get("logging") or {}
    return setup_logging(
        level=level or cfg.get("level", default),
        log_file=cfg.get("file"),
        module_levels=cfg.get("modules"),
    )


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger under the ``hunt`` hierarchy; bare names get the ``hunt.`` prefix."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


# Initialize default logger on module import
_default_logger = setup_logging()
