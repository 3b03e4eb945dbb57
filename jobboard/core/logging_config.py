"""
Logging setup - one call at startup, module loggers everywhere else.

Usage:
    logger = logging.getLogger(__name__)
"""

import logging

from jobboard.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = None) -> None:
    """Configure the root logger from settings (idempotent)."""
    settings = get_settings()
    level = (level or settings.log_level).upper()

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    # Driver chatter
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
