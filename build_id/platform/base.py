"""Probe interface for linker-embedded build ids.

Each binary format family gets one implementation; the selector only ever talks
to this protocol, so format-specific parsing never leaks into the fallback
chain.

Interface
---------
- ``name``: short label recorded in diagnostics
- ``read_build_id(handle, max_bytes) -> bytes``: return the raw id or raise
  :class:`~build_id.common.errors.MetadataUnavailable`

Probes must translate parser faults on truncated or malformed images into
``MetadataUnavailable``; nothing else may escape.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Protocol

from build_id.common.errors import MetadataUnavailable


class BuildIdProbe(Protocol):
    """Reads a platform build id from an open executable image."""

    name: str

    def read_build_id(self, handle: BinaryIO, max_bytes: int) -> bytes:
        """Return the build id embedded in ``handle``.

        Parameters
        ----------
        handle : BinaryIO
            Seekable binary handle positioned anywhere.
        max_bytes : int
            Upper bound on the size of any single region read.

        Raises
        ------
        MetadataUnavailable
            If the image has no build id or cannot be parsed.
        """


def read_exact(handle: BinaryIO, offset: int, size: int, max_bytes: int) -> bytes:
    """Read ``size`` bytes at ``offset`` or raise MetadataUnavailable."""

    if size < 0 or offset < 0:
        raise MetadataUnavailable(f"invalid region offset={offset} size={size}")
    if size > max_bytes:
        raise MetadataUnavailable(f"metadata region of {size} bytes exceeds limit {max_bytes}")
    try:
        handle.seek(offset)
        data = handle.read(size)
    except (OSError, OverflowError, ValueError) as exc:
        # offsets past the platform off_t range come from untrusted header fields
        raise MetadataUnavailable(f"read failed at offset {offset}: {exc}") from exc
    if len(data) != size:
        raise MetadataUnavailable(f"truncated image: wanted {size} bytes at {offset}")
    return data


def unpack_from(fmt: str, data: bytes, offset: int = 0) -> tuple:
    """struct.unpack_from that reports malformed input as MetadataUnavailable."""

    try:
        return struct.unpack_from(fmt, data, offset)
    except struct.error as exc:
        raise MetadataUnavailable(f"malformed header: {exc}") from exc


__all__ = ["BuildIdProbe", "read_exact", "unpack_from"]
