"""
Logging setup for the call assistant.

Every module logs through the single LOGGER_NAME logger. configure_logging()
attaches a console handler and a rotating file handler to it; log_api_call()
writes the one-line summary emitted after each OpenAI or ElevenLabs request.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from call_assistant.config.constants import LOGGER_NAME

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Rotating call log
LOG_DIR = Path("logs")
LOG_FILE_NAME = "call_assistant.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[str] = None, log_dir: Path = LOG_DIR):
    """
    Configure the call assistant logger.

    Safe to call more than once: handlers from a previous call are replaced,
    so the server and the run script can both configure logging.

    Args:
        level: Level name; defaults to the LOG_LEVEL environment variable
        log_dir: Directory for the rotating call log

    Returns:
        logging.Logger: The configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))

    # Replace handlers from an earlier call
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    # Console
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File, skipped when the directory cannot be created
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=MAX_LOG_SIZE,
            backupCount=BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError as e:
        logger.warning(f"Could not set up file logging in {log_dir}: {e}")

    # Uvicorn configures the root logger separately
    logger.propagate = False

    logger.info(f"Logging configured at {logging.getLevelName(logger.level)}")
    return logger


def log_api_call(
    logger: logging.Logger,
    service: str,
    endpoint: str,
    duration_ms: float,
    success: bool,
    **details,
) -> None:
    """Log the outcome of a downstream API request in a single line."""
    detail_text = ", ".join(f"{key}={value}" for key, value in details.items())
    message = (
        f"API call {service} {endpoint} "
        f"{'succeeded' if success else 'failed'} in {duration_ms:.0f}ms"
        + (f" ({detail_text})" if detail_text else "")
    )
    if success:
        logger.info(message)
    else:
        logger.warning(message)
