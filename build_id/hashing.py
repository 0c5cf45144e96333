"""Streaming 64-bit hash accumulator.

Wraps a BLAKE2b context with an 8-byte digest. ``finish`` does not finalize the
underlying context, so more data can be written after a digest is taken; the
formatter relies on that to derive a second, dependent digest.
"""

from __future__ import annotations

import hashlib
from typing import BinaryIO

DIGEST_SIZE = 8


class HashAccumulator:
    """Stateful 64-bit hash context fed with build evidence."""

    __slots__ = ("_state",)

    def __init__(self, state=None) -> None:
        self._state = state if state is not None else hashlib.blake2b(digest_size=DIGEST_SIZE)

    def write(self, data: bytes) -> None:
        self._state.update(data)

    def write_u8(self, value: int) -> None:
        self._state.update(bytes((value & 0xFF,)))

    def write_u64(self, value: int) -> None:
        """Write ``value`` as 8 little-endian bytes (truncated to 64 bits)."""

        self._state.update((value & 0xFFFF_FFFF_FFFF_FFFF).to_bytes(8, "little"))

    def write_str(self, value: str) -> None:
        """Write a length-prefixed UTF-8 string."""

        encoded = value.encode("utf-8")
        self.write_u64(len(encoded))
        self._state.update(encoded)

    def consume(self, stream: BinaryIO, chunk_size: int) -> int:
        """Stream ``stream`` to EOF into the accumulator.

        Returns:
            int: Number of bytes consumed.
        """
        total = 0
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                return total
            self._state.update(chunk)
            total += len(chunk)

    def copy(self) -> HashAccumulator:
        return HashAccumulator(self._state.copy())

    def finish(self) -> int:
        """Return the current 64-bit digest without finalizing the context."""

        return int.from_bytes(self._state.digest(), "little")


__all__ = ["DIGEST_SIZE", "HashAccumulator"]
