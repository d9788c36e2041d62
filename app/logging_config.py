"""
Structured logging configuration for the entire application.
Call setup_logging() once at startup (main.py).
"""

import logging
import os
import sys


def setup_logging(level: str = None):
    """Configure structured logging to stdout for the 'app' namespace."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root = logging.getLogger("app")
    root.setLevel(level)

    # uvicorn --reload imports main twice
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
