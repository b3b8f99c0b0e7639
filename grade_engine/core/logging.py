# grade_engine/core/logging.py
"""Logging configuration."""
import logging
import sys
from .config import settings


def setup_logging(level: str = None):
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
