"""Probe for platforms without a known build-id mechanism."""

from __future__ import annotations

from typing import BinaryIO

from build_id.common.errors import MetadataUnavailable


class UnsupportedProbe:
    """Always falls through to the next identity stage."""

    name = "unsupported"

    def __init__(self, platform: str = "unknown") -> None:
        self.platform = platform

    def read_build_id(self, handle: BinaryIO, max_bytes: int) -> bytes:
        raise MetadataUnavailable(f"no build-id mechanism for platform {self.platform!r}")
