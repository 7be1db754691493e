"""Logging configuration for cargo-matrix.

This module provides centralized logging configuration using loguru.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_configured = False


def configure_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    format: Optional[str] = None
) -> None:
    """Configure logging for cargo-matrix.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for logging
        format: Optional custom format string
    """
    global _configured

    if _configured:
        return

    if format is None:
        format = (
            "<green>{time:HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        )

    # Remove default loguru handler
    logger.remove()

    logger.add(
        sys.stderr,
        format=format,
        level=level.upper(),
        colorize=True
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            format=format,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip"
        )

    intercept_standard_logging()

    _configured = True


def intercept_standard_logging() -> None:
    """Intercept standard library logging and redirect to loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding Loguru level if it exists
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


__all__ = ["logger", "configure_logging"]
