"""
Common utilities for the build_id package.

Error taxonomy for the fallback chain and logging configuration.
"""

from build_id.common.errors import (
    ExecutableUnreadable,
    IdentitySourceUnavailable,
    MetadataUnavailable,
    log_soft_degrade,
)
from build_id.common.logging import configure_logging, get_logger

__all__ = [  # noqa: RUF022 - Grouped by source module for clarity
    # Errors (from .errors)
    "IdentitySourceUnavailable",
    "MetadataUnavailable",
    "ExecutableUnreadable",
    "log_soft_degrade",
    # Logging (from .logging)
    "configure_logging",
    "get_logger",
]
