#!/usr/bin/env python3
"""UTF-8-safe logging setup for isscheck."""

import logging
import sys
from pathlib import Path
from typing import Optional


class UTF8StreamHandler(logging.StreamHandler):
    """Stream handler that keeps console output UTF-8 safe.

    Installer scripts and registry names are plain ASCII most of the time,
    but paths on Windows build agents are not. The stream is reconfigured
    in place instead of being wrapped, so the handler never owns (and never
    closes) the interpreter's stderr buffer.
    """

    def __init__(self, stream=None):
        if stream is None:
            stream = sys.stderr
        encoding = getattr(stream, "encoding", None) or ""
        if encoding.lower() not in ("utf-8", "utf8") and hasattr(stream, "reconfigure"):
            try:
                stream.reconfigure(encoding="utf-8", errors="replace")
            except (ValueError, OSError):
                pass  # stream already in use, keep its encoding
        super().__init__(stream)


def setup_logger(name: str = "isscheck",
                 log_level: str = "INFO",
                 log_file: Optional[str] = None) -> logging.Logger:
    """Setup a UTF-8-safe logger with console and optional file output."""

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Console handler
    console_handler = UTF8StreamHandler()
    console_format = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8', errors='replace')
        file_format = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    return logger


# Global logger instance shared by the checker modules
logger = setup_logger(log_level="WARNING")
