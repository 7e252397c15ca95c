# product_cache/config/logging_config.py

"""Logging for a product_cache run.

Every launch writes ``logs/run_<timestamp>.log`` at DEBUG.  The console
only shows ``Settings.LOG_LEVEL`` and above (WARNING unless overridden),
which is where cache fallbacks and failed write-backs surface.

The package logs under these names::

    product_cache.coordinator   online/offline decisions, fallbacks
    product_cache.remote        HTTP attempts, backoff, circuit breaker
    product_cache.store         cache writes and purges
    product_cache.connectivity  reachability checks, one per request
    product_cache.state         pagination state transitions
    product_cache.cli           command output
    product_cache.main          startup

``Settings.LOGGER_LEVELS`` raises individual loggers above DEBUG; by
default the per-request reachability checks stay out of the log file.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from product_cache.config.settings import Settings

ROOT_LOGGER = "product_cache"

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(name: str) -> int:
    """Turn a level name such as ``"info"`` into its numeric value.

    Raises:
        ValueError: if ``name`` is not a standard logging level.
    """
    level = logging.getLevelName(name.strip().upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {name!r}"
        raise ValueError(msg)
    return level


def _apply_logger_levels(levels: dict[str, str]) -> None:
    for suffix, name in levels.items():
        logging.getLogger(f"{ROOT_LOGGER}.{suffix}").setLevel(
            resolve_level(name)
        )


def setup_logging(console_level: str | None = None) -> Path:
    """Initialise the ``product_cache`` logger tree for the current run.

    Args:
        console_level: Level name for the console handler.  Defaults to
            ``Settings.LOG_LEVEL``.

    Returns:
        The path of the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(logging.DEBUG)
    _apply_logger_levels(Settings.LOGGER_LEVELS)

    # Prevent duplicate handlers on repeated calls (e.g. tests)
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(
        resolve_level(console_level or Settings.LOG_LEVEL)
    )
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
