"""Fallback error taxonomy for the identity source chain.

Every exception here means "this source is not available, try the next one".
None of them ever reaches callers of the public accessor.
"""

from __future__ import annotations

from loguru import logger


class IdentitySourceUnavailable(RuntimeError):
    """A fallible identity stage could not provide evidence.

    Parameters
    ----------
    stage : str
        Name of the stage that fell through.
    reason : str
        Human-readable explanation.
    """

    stage: str = "unknown"

    def __init__(self, reason: str, *, stage: str | None = None) -> None:
        super().__init__(reason)
        if stage is not None:
            self.stage = stage
        self.reason = reason


class MetadataUnavailable(IdentitySourceUnavailable):
    """No linker-embedded build id could be read for the executable."""

    stage = "platform_build_id"


class ExecutableUnreadable(IdentitySourceUnavailable):
    """The running executable has no addressable, readable file."""

    stage = "executable_image"


def log_soft_degrade(stage: str, issue: str, fallback: str) -> None:
    """Log an expected stage fallback.

    Parameters
    ----------
    stage : str
        Name of the stage that failed
    issue : str
        Description of what failed
    fallback : str
        What happens instead
    """
    logger.debug(
        "Identity stage '{}' unavailable: {}. Fallback: {}",
        stage,
        issue,
        fallback,
    )
