"""Rotating file + console logging setup."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


def setup_logging(log_dir: Optional[str] = "logs", level: str = "INFO") -> logging.Logger:
    """Configure the ``jobboard`` logger with console and optional rotating file output."""
    logger = logging.getLogger("jobboard")
    logger.setLevel(level.upper())

    # Clear existing handlers to avoid duplicates on re-init
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # 5MB per file, keep 3 backups
        file_handler = RotatingFileHandler(
            log_path / "jobboard.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
