"""Logging configuration for Represent using loguru."""

import sys
from pathlib import Path
from typing import Callable

from loguru import logger

from represent.config import Settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"

MASK = "***"


def configured_secrets(settings: Settings) -> list[str]:
    """API keys that must never appear in log output."""
    keys = [
        settings.congress_key(),
        settings.open_states_key(),
        settings.geocode_services.geocodio.api_key,
    ]
    return [k for k in keys if k]


def redactor(secrets: list[str]) -> Callable[[dict], None]:
    """Build a loguru patcher that masks ``secrets`` in every message."""

    def patch(record: dict) -> None:
        message = record["message"]
        for secret in secrets:
            message = message.replace(secret, MASK)
        record["message"] = message

    return patch


def setup_logging(settings: Settings) -> None:
    """
    Configure loguru logging based on settings.

    Logs go to stderr so ``lookup --json`` output on stdout stays parseable.
    A rotating file sink is added unless ``log_file`` is empty. Configured
    API keys are masked in all sinks.

    Args:
        settings: Application settings containing log level, file path and keys.
    """
    logger.remove()
    logger.configure(patcher=redactor(configured_secrets(settings)))

    logger.add(sys.stderr, level=settings.log_level, format=CONSOLE_FORMAT)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            level=settings.log_level,
            format=FILE_FORMAT,
            rotation="10 MB",
            retention="30 days",
            compression="zip",
        )

    logger.info("Logging configured: level={}, file={}", settings.log_level, settings.log_file or "(none)")
