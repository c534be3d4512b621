"""
Logging configuration for the admin console.

Call configure_logging() once at startup (done in main.py).
Modules under db/ use logging.getLogger(__name__) directly; console modules
may use get_logger(__name__).

Log level is controlled by the LOG_LEVEL environment variable (default: INFO).
"""

import logging
import os

_CONFIGURED = False

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure_logging() -> None:
    """Configure the root logger. Safe to call on every Streamlit rerun."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    # httpx logs every PostgREST request at INFO
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a module-level logger. Call as get_logger(__name__)."""
    return logging.getLogger(name)
