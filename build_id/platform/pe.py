"""CodeView build-id extraction from PE images (Windows, Cygwin).

The MSVC and lld linkers record a PDB signature in a ``IMAGE_DEBUG_TYPE_CODEVIEW``
entry of the debug data directory. For ``RSDS`` records the id is the 16-byte
GUID followed by the 4-byte age; legacy ``NB10`` records contribute their
timestamp signature and age.
"""

from __future__ import annotations

from typing import BinaryIO, Final

from build_id.common.errors import MetadataUnavailable
from build_id.platform.base import read_exact, unpack_from

DOS_MAGIC: Final[bytes] = b"MZ"
PE_SIGNATURE: Final[bytes] = b"PE\x00\x00"
PE32_MAGIC: Final[int] = 0x10B
PE32_PLUS_MAGIC: Final[int] = 0x20B
IMAGE_DIRECTORY_ENTRY_DEBUG: Final[int] = 6
IMAGE_DEBUG_TYPE_CODEVIEW: Final[int] = 2

_SECTION_FMT: Final[str] = "<8sIIIIIIHHI"
_SECTION_SIZE: Final[int] = 40
_DEBUG_ENTRY_FMT: Final[str] = "<IIHHIIII"
_DEBUG_ENTRY_SIZE: Final[int] = 28
# optional header magic -> (NumberOfRvaAndSizes offset, data directory offset)
_OPTIONAL_LAYOUTS: Final[dict[int, tuple[int, int]]] = {
    PE32_MAGIC: (92, 96),
    PE32_PLUS_MAGIC: (108, 112),
}


def parse_codeview(record: bytes) -> bytes:
    """Return the identifying bytes of a CodeView debug record."""

    if record[:4] == b"RSDS" and len(record) >= 24:
        return record[4:24]
    if record[:4] == b"NB10" and len(record) >= 16:
        return record[8:16]
    raise MetadataUnavailable("unrecognised CodeView record")


def _rva_to_offset(rva: int, sections: list[tuple[int, int, int]]) -> int:
    for virtual_address, extent, raw_pointer in sections:
        if virtual_address <= rva < virtual_address + extent:
            return rva - virtual_address + raw_pointer
    raise MetadataUnavailable(f"RVA {rva:#x} not mapped by any section")


class PeProbe:
    """Build-id probe for PE platforms."""

    name = "pe"

    def read_build_id(self, handle: BinaryIO, max_bytes: int) -> bytes:
        dos = read_exact(handle, 0, 64, max_bytes)
        if dos[:2] != DOS_MAGIC:
            raise MetadataUnavailable("not a PE image")
        (e_lfanew,) = unpack_from("<I", dos, 0x3C)

        nt = read_exact(handle, e_lfanew, 24, max_bytes)
        if nt[:4] != PE_SIGNATURE:
            raise MetadataUnavailable("missing PE signature")
        _, n_sections, _, _, _, optional_size, _ = unpack_from("<HHIIIHH", nt, 4)

        optional = read_exact(handle, e_lfanew + 24, optional_size, max_bytes)
        (magic,) = unpack_from("<H", optional)
        if magic not in _OPTIONAL_LAYOUTS:
            raise MetadataUnavailable(f"unknown optional header magic {magic:#x}")
        count_offset, directories_offset = _OPTIONAL_LAYOUTS[magic]
        (n_directories,) = unpack_from("<I", optional, count_offset)
        if n_directories <= IMAGE_DIRECTORY_ENTRY_DEBUG:
            raise MetadataUnavailable("image has no debug data directory")
        debug_rva, debug_size = unpack_from(
            "<II", optional, directories_offset + 8 * IMAGE_DIRECTORY_ENTRY_DEBUG
        )
        if not debug_rva or not debug_size:
            raise MetadataUnavailable("debug data directory is empty")

        table = read_exact(handle, e_lfanew + 24 + optional_size, _SECTION_SIZE * n_sections, max_bytes)
        sections = []
        for index in range(n_sections):
            fields = unpack_from(_SECTION_FMT, table, index * _SECTION_SIZE)
            virtual_size, virtual_address, raw_size, raw_pointer = fields[1:5]
            sections.append((virtual_address, max(virtual_size, raw_size), raw_pointer))

        entries = read_exact(handle, _rva_to_offset(debug_rva, sections), debug_size, max_bytes)
        for index in range(debug_size // _DEBUG_ENTRY_SIZE):
            fields = unpack_from(_DEBUG_ENTRY_FMT, entries, index * _DEBUG_ENTRY_SIZE)
            debug_type, data_size, data_pointer = fields[4], fields[5], fields[7]
            if debug_type == IMAGE_DEBUG_TYPE_CODEVIEW and data_size:
                return parse_codeview(read_exact(handle, data_pointer, data_size, max_bytes))
        raise MetadataUnavailable("PE image carries no CodeView debug record")


__all__ = ["IMAGE_DEBUG_TYPE_CODEVIEW", "PeProbe", "parse_codeview"]
