"""GNU build-id extraction from ELF images.

The linker (``--build-id``) stores the id in a note with owner ``GNU`` and type
``NT_GNU_BUILD_ID``. Notes are looked up through ``PT_NOTE`` program headers
first, which is what the loader maps, and through ``SHT_NOTE`` sections second.
Both ELF classes and both byte orders are handled.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO, Final

from build_id.common.errors import MetadataUnavailable
from build_id.platform.base import read_exact, unpack_from

ELF_MAGIC: Final[bytes] = b"\x7fELF"
NT_GNU_BUILD_ID: Final[int] = 3
GNU_NOTE_OWNER: Final[bytes] = b"GNU\x00"
PT_NOTE: Final[int] = 4
SHT_NOTE: Final[int] = 7
PN_XNUM: Final[int] = 0xFFFF

ELFCLASS32: Final[int] = 1
ELFCLASS64: Final[int] = 2
ELFDATA2LSB: Final[int] = 1
ELFDATA2MSB: Final[int] = 2


@dataclass(slots=True, frozen=True)
class _TableLayout:
    """struct format of one header-table entry and the indices we need."""

    fmt: str
    type_index: int
    offset_index: int
    size_index: int
    align_index: int


@dataclass(slots=True, frozen=True)
class _ClassLayout:
    header_tail: str
    program: _TableLayout
    section: _TableLayout


_LAYOUTS: Final[dict[int, _ClassLayout]] = {
    ELFCLASS32: _ClassLayout(
        header_tail="HHIIIIIHHHHHH",
        program=_TableLayout("IIIIIIII", type_index=0, offset_index=1, size_index=4, align_index=7),
        section=_TableLayout("IIIIIIIIII", type_index=1, offset_index=4, size_index=5, align_index=8),
    ),
    ELFCLASS64: _ClassLayout(
        header_tail="HHIQQQIHHHHHH",
        program=_TableLayout("IIQQQQQQ", type_index=0, offset_index=2, size_index=5, align_index=7),
        section=_TableLayout("IIQQQQIIQQ", type_index=1, offset_index=4, size_index=5, align_index=8),
    ),
}

# sh_info sits at the same position in both section header formats
_SH_INFO_INDEX: Final[int] = 7


def _align(value: int, alignment: int) -> int:
    return (value + alignment - 1) & ~(alignment - 1)


def find_gnu_build_id(notes: bytes, byte_order: str, alignment: int = 4) -> bytes | None:
    """Scan a packed note region and return the GNU build-id descriptor."""

    pos = 0
    while pos + 12 <= len(notes):
        namesz, descsz, note_type = unpack_from(f"{byte_order}III", notes, pos)
        name_start = pos + 12
        desc_start = _align(name_start + namesz, alignment)
        desc_end = desc_start + descsz
        if desc_end > len(notes):
            return None
        owner = notes[name_start : name_start + namesz]
        if note_type == NT_GNU_BUILD_ID and owner == GNU_NOTE_OWNER:
            return notes[desc_start:desc_end] or None
        pos = _align(desc_end, alignment)
    return None


class ElfProbe:
    """Build-id probe for ELF platforms (Linux, the BSDs, Solaris)."""

    name = "elf"

    def read_build_id(self, handle: BinaryIO, max_bytes: int) -> bytes:
        ident = read_exact(handle, 0, 16, max_bytes)
        if ident[:4] != ELF_MAGIC:
            raise MetadataUnavailable("not an ELF image")
        elf_class, data_encoding = ident[4], ident[5]
        if elf_class not in _LAYOUTS or data_encoding not in (ELFDATA2LSB, ELFDATA2MSB):
            raise MetadataUnavailable(f"unsupported ELF class/encoding {elf_class}/{data_encoding}")
        order = "<" if data_encoding == ELFDATA2LSB else ">"
        layout = _LAYOUTS[elf_class]

        tail_fmt = order + layout.header_tail
        header = read_exact(handle, 0, 16 + struct.calcsize(tail_fmt), max_bytes)
        fields = unpack_from(tail_fmt, header, 16)
        e_phoff, e_shoff = fields[4], fields[5]
        e_phentsize, e_phnum, e_shentsize, e_shnum = fields[8], fields[9], fields[10], fields[11]
        if e_shoff and (e_phnum == PN_XNUM or not e_shnum):
            e_phnum, e_shnum = _extended_counts(
                handle, order, layout.section, e_shoff, e_phnum, e_shnum, max_bytes
            )

        tables = (
            (layout.program, PT_NOTE, e_phoff, e_phentsize, e_phnum),
            (layout.section, SHT_NOTE, e_shoff, e_shentsize, e_shnum),
        )
        for table, wanted, table_offset, entry_size, count in tables:
            for offset, size, align in _note_regions(
                handle, order, table, wanted, table_offset, entry_size, count, max_bytes
            ):
                notes = read_exact(handle, offset, size, max_bytes)
                build_id = find_gnu_build_id(notes, order, align)
                if build_id is not None:
                    return build_id

        raise MetadataUnavailable("ELF image carries no GNU build-id note")


def _extended_counts(
    handle: BinaryIO,
    order: str,
    table: _TableLayout,
    e_shoff: int,
    e_phnum: int,
    e_shnum: int,
    max_bytes: int,
) -> tuple[int, int]:
    """Resolve header counts that overflowed into section 0 (sh_info, sh_size)."""

    fmt = order + table.fmt
    initial = unpack_from(fmt, read_exact(handle, e_shoff, struct.calcsize(fmt), max_bytes))
    if e_phnum == PN_XNUM:
        e_phnum = initial[_SH_INFO_INDEX]
    if not e_shnum:
        e_shnum = initial[table.size_index]
    return e_phnum, e_shnum


def _note_regions(
    handle: BinaryIO,
    order: str,
    table: _TableLayout,
    wanted: int,
    table_offset: int,
    entry_size: int,
    count: int,
    max_bytes: int,
) -> Iterator[tuple[int, int, int]]:
    """Yield (offset, size, alignment) of note entries in one header table."""

    if not table_offset or not count:
        return
    fmt = order + table.fmt
    if entry_size < struct.calcsize(fmt):
        raise MetadataUnavailable(f"header table entry size {entry_size} too small")
    raw = read_exact(handle, table_offset, entry_size * count, max_bytes)
    for index in range(count):
        fields = unpack_from(fmt, raw, index * entry_size)
        size = fields[table.size_index]
        if fields[table.type_index] == wanted and size:
            align = 8 if fields[table.align_index] == 8 else 4
            yield fields[table.offset_index], size, align


__all__ = ["ELF_MAGIC", "ElfProbe", "GNU_NOTE_OWNER", "NT_GNU_BUILD_ID", "find_gnu_build_id"]
