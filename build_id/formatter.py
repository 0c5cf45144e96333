"""Expand a 64-bit accumulator digest into a UUID-shaped build identifier.

Layout of the 16 output bytes:

- bytes 0..7: first digest, little endian
- bytes 8..15: digest after one extra discriminator byte was written
- byte 6 high nibble: version 4
- byte 8 top two bits: RFC 4122 variant (``10``)

The version/variant bits are cosmetic. They make the value parse as a regular
UUID; they add no entropy.
"""

from __future__ import annotations

import uuid

from build_id.hashing import HashAccumulator

VERSION = 4
_VERSION_MASK = 0x0F
_VARIANT_MASK = 0x3F
_VARIANT_BITS = 0x80


def apply_layout_bits(raw: bytes) -> bytes:
    """Overwrite the version and variant fields of a 16-byte buffer."""

    if len(raw) != 16:
        raise ValueError(f"expected 16 bytes, got {len(raw)}")
    buf = bytearray(raw)
    buf[6] = (buf[6] & _VERSION_MASK) | (VERSION << 4)
    buf[8] = (buf[8] & _VARIANT_MASK) | _VARIANT_BITS
    return bytes(buf)


def format_identifier(accumulator: HashAccumulator, discriminator: int = 0) -> uuid.UUID:
    """Derive the build identifier from the accumulator state.

    The accumulator is advanced by one byte; callers must not reuse it for
    anything that expects the pre-format state.
    """
    first = accumulator.finish()
    accumulator.write_u8(discriminator)
    second = accumulator.finish()
    raw = first.to_bytes(8, "little") + second.to_bytes(8, "little")
    return uuid.UUID(bytes=apply_layout_bits(raw))


def has_valid_layout(identifier: uuid.UUID) -> bool:
    """Return True when the fixed version/variant fields match."""

    return identifier.version == VERSION and identifier.variant == uuid.RFC_4122


__all__ = ["VERSION", "apply_layout_bits", "format_identifier", "has_valid_layout"]
