"""Centralized logging configuration for build_id.

Loguru is the logging facade. Library modules log through
``from loguru import logger``; the package disables its own records on import so
embedding applications stay quiet until they opt in with configure_logging().

Usage (in scripts):
    >>> from build_id.common.logging import configure_logging
    >>> configure_logging(verbose=True)

Usage (in modules):
    >>> from loguru import logger
    >>> logger.debug("Stage '{}' unavailable: {}", "platform_build_id", "no note")
"""

from __future__ import annotations

import sys

from loguru import logger

PACKAGE_LOGGER_NAME = "build_id"


def configure_logging(verbose: bool = False) -> None:
    """Configure the global loguru logger and enable build_id records.

    # <https://loguru.readthedocs.io/en/stable/>

    Args:
        verbose: If True, enable DEBUG level (stage fallbacks become visible);
            if False, use INFO level.

    Note:
        Idempotent. Existing sinks are removed before the stderr sink is added.
    """
    logger.remove()

    log_format = (
        "<level>{level: <7}</level>| "
        "<dim><cyan>{file}:{line}</cyan></dim> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=log_format,
        level="DEBUG" if verbose else "INFO",
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )
    logger.enable(PACKAGE_LOGGER_NAME)


def get_logger(name: str):
    """Get a logger instance bound to a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger bound to the module context
    """
    return logger.bind(module=name)
