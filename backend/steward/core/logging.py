"""
Logging configuration shared by the API process and Celery workers.
"""

import logging
import sys
from typing import Optional

from steward.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers and the level they are pinned to
LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "celery": logging.INFO,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "redis": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger and quieten chatty libraries."""
    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    quiet_libraries()


def quiet_libraries() -> None:
    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)

    # SQL echo goes through the engine logger
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )
