"""Logging Utilities for the Dinner Planner
==========================================

Centralized logging configuration and utilities.

Usage:
    from tools.logging_utils import get_logger

    logger = get_logger(__name__)
    logger.info("Operation completed successfully")
    logger.error("Operation failed")

Standards:
    - Planning/operational code: MUST use logger
    - User-facing output: Use the rich console in tools.progress_ui
    - Log levels: CRITICAL, ERROR, WARNING, INFO, DEBUG
    - Configuration: config.LOGGING_CONFIG
    - Location: data/logs/dinner_planner.log (10MB rotation, 5 backups)
"""

import os
import logging
import logging.config

from config import LOGGING_CONFIG, LOG_DIR

_configured = False


def setup_logging():
    """
    Initialize logging configuration once.

    Idempotent - safe to call multiple times.
    """
    global _configured
    if _configured:
        return
    try:
        os.makedirs(str(LOG_DIR), exist_ok=True)
        logging.config.dictConfig(LOGGING_CONFIG)
    except (OSError, ValueError) as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger(__name__).warning(f"⚠️ Logging setup failed, using basic config: {e}")
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get logger for module.

    Args:
        name: Module name (use __name__)

    Returns:
        Configured logger instance
    """
    setup_logging()
    return logging.getLogger(name)
