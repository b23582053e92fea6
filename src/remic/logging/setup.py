"""Loguru setup for the dream journal.

Every record carries the journal it belongs to and the configured rewrite
provider, so a shared log file can be read per journal.
"""

import sys
from pathlib import Path
from typing import Any

from loguru import logger

from ..config.settings import RemicConfig, config

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} | "
    "journal={extra[journal]} provider={extra[provider]} | {message}"
)


def setup_logging(
    settings: RemicConfig | None = None,
    level: str | None = None,
    log_file: Path | None = None,
    journal: Path | None = None,
) -> None:
    """Route journal logs to stderr and, when configured, a rotating file.

    Args:
        settings: Configuration to read defaults from (module config if None)
        level: Overrides ``settings.log_level``
        log_file: Overrides ``settings.log_file``
        journal: Dream file in use; defaults to ``settings.store_path``
    """
    settings = settings or config
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file
    journal = journal or settings.store_path

    logger.remove()
    logger.configure(extra={
        "name": settings.service_name,
        "journal": str(journal),
        "provider": settings.rewrite_provider,
        "environment": settings.environment,
    })

    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT if settings.is_development else FILE_FORMAT,
        colorize=settings.is_development,
        diagnose=settings.debug,
        catch=True,
    )

    if log_file:
        log_file = Path(log_file).expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            format=FILE_FORMAT,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            diagnose=False,
            catch=True,
        )

    logger.debug(f"Logging to stderr{f' and {log_file}' if log_file else ''} at {level}")


def get_logger(name: str) -> Any:
    """Get a logger bound to a module name (typically __name__)."""
    return logger.bind(name=name)
