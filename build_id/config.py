"""Tunables for the uncached identity calculation.

The public accessor always uses ``DEFAULT_CONFIG``. Other instances exist for
diagnostics and tests (e.g. pointing the chain at a different executable).
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

DEFAULT_CHUNK_SIZE: Final[int] = 64 * 1024
DEFAULT_MAX_METADATA_BYTES: Final[int] = 1024 * 1024

# Targets without an addressable executable image.
SANDBOXED_PLATFORMS: Final[frozenset[str]] = frozenset({"emscripten", "wasi"})


@dataclass(slots=True, frozen=True)
class IdentityConfig:
    """Configuration for one identity calculation.

    Attributes:
        chunk_size: Read size used when streaming the executable image.
        max_metadata_bytes: Upper bound for any metadata region a probe reads.
        discriminator: Byte written between the two digests of the formatter.
        platform: Platform tag (``sys.platform`` style) selecting probe and sandbox rules.
        executable: Explicit executable path; ``None`` resolves the running one.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_metadata_bytes: int = DEFAULT_MAX_METADATA_BYTES
    discriminator: int = 0
    platform: str = field(default_factory=lambda: sys.platform)
    executable: Path | None = None

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if self.max_metadata_bytes < 64:
            raise ValueError("max_metadata_bytes must be >= 64")
        if not 0 <= self.discriminator <= 0xFF:
            raise ValueError("discriminator must be in range 0..255")

    @property
    def sandboxed(self) -> bool:
        """Return True when the platform has no addressable executable."""

        return self.platform in SANDBOXED_PLATFORMS


DEFAULT_CONFIG: Final[IdentityConfig] = IdentityConfig()

__all__ = ["DEFAULT_CONFIG", "IdentityConfig", "SANDBOXED_PLATFORMS"]
