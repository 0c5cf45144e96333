"""``LC_UUID`` extraction from Mach-O images.

ld64 writes a 16-byte UUID load command into every linked image. Thin images of
either word size and byte order are parsed directly. For fat (universal) images
the slice matching the running CPU is used, falling back to the first slice.
"""

from __future__ import annotations

import platform as _platform
from typing import BinaryIO, Final

from build_id.common.errors import MetadataUnavailable
from build_id.platform.base import read_exact, unpack_from

LC_UUID: Final[int] = 0x1B

# magic bytes as they appear on disk -> (byte order, header size)
_THIN_MAGICS: Final[dict[bytes, tuple[str, int]]] = {
    b"\xfe\xed\xfa\xce": (">", 28),
    b"\xce\xfa\xed\xfe": ("<", 28),
    b"\xfe\xed\xfa\xcf": (">", 32),
    b"\xcf\xfa\xed\xfe": ("<", 32),
}
FAT_MAGIC: Final[bytes] = b"\xca\xfe\xba\xbe"
FAT_MAGIC_64: Final[bytes] = b"\xca\xfe\xba\xbf"
# Java class files share FAT_MAGIC; their version field reads as a large count.
_MAX_FAT_ARCHS: Final[int] = 32

CPU_TYPES: Final[dict[str, int]] = {
    "i386": 0x7,
    "x86_64": 0x01000007,
    "arm": 0xC,
    "arm64": 0x0100000C,
    "aarch64": 0x0100000C,
    "ppc": 0x12,
    "ppc64": 0x01000012,
}


class MachOProbe:
    """Build-id probe for Mach-O platforms (macOS, iOS)."""

    name = "macho"

    def __init__(self, machine: str | None = None) -> None:
        self.machine = machine if machine is not None else _platform.machine()

    def read_build_id(self, handle: BinaryIO, max_bytes: int) -> bytes:
        magic = read_exact(handle, 0, 4, max_bytes)
        if magic in (FAT_MAGIC, FAT_MAGIC_64):
            return self._read_thin(handle, self._select_slice(handle, magic, max_bytes), max_bytes)
        return self._read_thin(handle, 0, max_bytes)

    def _select_slice(self, handle: BinaryIO, magic: bytes, max_bytes: int) -> int:
        (count,) = unpack_from(">I", read_exact(handle, 4, 4, max_bytes))
        if not 0 < count <= _MAX_FAT_ARCHS:
            raise MetadataUnavailable(f"implausible fat arch count {count}")
        entry_fmt, entry_size = (">iiQQII", 32) if magic == FAT_MAGIC_64 else (">iiIII", 20)
        table = read_exact(handle, 8, entry_size * count, max_bytes)
        offsets = []
        wanted = CPU_TYPES.get(self.machine)
        for index in range(count):
            fields = unpack_from(entry_fmt, table, index * entry_size)
            cputype, offset = fields[0], fields[2]
            if cputype == wanted:
                return offset
            offsets.append(offset)
        return offsets[0]

    @staticmethod
    def _read_thin(handle: BinaryIO, base: int, max_bytes: int) -> bytes:
        magic = read_exact(handle, base, 4, max_bytes)
        if magic not in _THIN_MAGICS:
            raise MetadataUnavailable("not a Mach-O image")
        order, header_size = _THIN_MAGICS[magic]
        header = read_exact(handle, base, header_size, max_bytes)
        _, _, _, _, ncmds, sizeofcmds, _ = unpack_from(f"{order}IiiIIII", header)

        commands = read_exact(handle, base + header_size, sizeofcmds, max_bytes)
        pos = 0
        for _ in range(ncmds):
            cmd, cmdsize = unpack_from(f"{order}II", commands, pos)
            if cmdsize < 8 or pos + cmdsize > len(commands):
                raise MetadataUnavailable(f"malformed load command at offset {pos}")
            if cmd == LC_UUID:
                if cmdsize < 24:
                    raise MetadataUnavailable("truncated LC_UUID command")
                return commands[pos + 8 : pos + 24]
            pos += cmdsize
        raise MetadataUnavailable("Mach-O image carries no LC_UUID command")


__all__ = ["CPU_TYPES", "FAT_MAGIC", "FAT_MAGIC_64", "LC_UUID", "MachOProbe"]
