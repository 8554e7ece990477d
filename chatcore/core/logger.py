"""
Application logger.

Modules import the shared instance with ``from chatcore.core.logger import logger``.
"""

import logging
import sys

from chatcore.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def setup_logger(name: str = "chatcore") -> logging.Logger:
    """Create the application logger with a single stream handler."""
    settings = get_settings()
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(settings.LOG_LEVEL.upper())
    log.propagate = False
    return log


logger = setup_logger()
