# src/config/logging_config.py

"""Per-run logging configuration for catalog_sync.

Every launch writes a dedicated ``logs/sync_<timestamp>.log`` file. All
``catalog_sync.*`` loggers (normalizer, sync manager, store adapters,
query engine, CLI) propagate into it, so a single file tells the whole
story of one sync session: which records were rejected, when the live
subscription failed, and whether the fallback fetch recovered.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "catalog_sync"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    console_level: int = logging.WARNING,
    logs_dir: Path | None = None,
) -> Path:
    """Attach file and console handlers to the ``catalog_sync`` logger.

    Args:
        console_level: Minimum level echoed to stderr. ``--verbose`` on
            the CLI lowers this to ``INFO``.
        logs_dir: Directory for the run log. Defaults to
            :attr:`Settings.LOGS_DIR`.

    Returns:
        The :class:`~pathlib.Path` of this run's log file. Repeated calls
        return a fresh path but do not stack extra handlers.
    """
    target_dir = logs_dir or Settings.LOGS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = target_dir / f"sync_{stamp}.log"

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info("Sync session log: %s", log_file)
    return log_file
