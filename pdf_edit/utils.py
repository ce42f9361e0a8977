"""Utilities shared by PDF Edit modules."""

from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "PDF_EDIT_LOG_LEVEL"
ROOT_LOGGER = "pdf_edit"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(os.environ.get(LOG_LEVEL_ENV, "WARNING").upper())
    return logger


def set_log_level(level: int | str) -> None:
    """Apply ``level`` to every ``pdf_edit`` logger created so far."""
    logging.getLogger(ROOT_LOGGER).setLevel(level)
    for name, logger in logging.root.manager.loggerDict.items():
        if name.startswith(ROOT_LOGGER + ".") and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500 KB")
    """
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"
