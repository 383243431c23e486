"""
Process-wide logging setup.

Modules log through ``logging.getLogger(__name__)``; this only installs the
console handler and level once at startup.
"""

import logging
import sys

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Attach a console handler to the package logger. Safe to call more than once."""
    logger = logging.getLogger("usermgmt")
    logger.setLevel(level.upper())

    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)
