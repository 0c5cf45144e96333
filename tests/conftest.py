"""Shared pytest fixtures: synthetic executable images and loguru capture.

The image builders produce the smallest byte layouts the probes accept. They
are exposed as fixtures returning builder callables so test modules in
subdirectories do not depend on import-path tricks.
"""

from __future__ import annotations

import struct
from contextlib import contextmanager
from typing import TYPE_CHECKING

import pytest
from loguru import logger

from build_id import accessor

if TYPE_CHECKING:
    from collections.abc import Generator


def _pad(data: bytes, alignment: int) -> bytes:
    return data + b"\x00" * (-len(data) % alignment)


def _gnu_note(order: str, build_id: bytes | None) -> bytes:
    abi_tag = struct.pack(f"{order}III", 4, 16, 1) + b"GNU\x00" + struct.pack(f"{order}IIII", 0, 3, 2, 0)
    if build_id is None:
        return abi_tag
    return abi_tag + struct.pack(f"{order}III", 4, len(build_id), 3) + b"GNU\x00" + _pad(build_id, 4)


def build_elf(
    build_id: bytes | None = b"\x11" * 20,
    *,
    elf_class: int = 2,
    little_endian: bool = True,
    use_sections: bool = False,
    payload: bytes = b"",
) -> bytes:
    """Return a minimal ELF image whose only note region may carry a build id."""

    order = "<" if little_endian else ">"
    ident = b"\x7fELF" + bytes((elf_class, 1 if little_endian else 2, 1, 0)) + b"\x00" * 8
    note = _gnu_note(order, build_id)

    if elf_class == 2:
        ehsize, phentsize, shentsize = 64, 56, 64
        tail_fmt = "HHIQQQIHHHHHH"
    else:
        ehsize, phentsize, shentsize = 52, 32, 40
        tail_fmt = "HHIIIIIHHHHHH"

    if use_sections:
        note_offset = ehsize
        shoff = _align8(note_offset + len(note))
        tail = struct.pack(order + tail_fmt, 2, 62, 1, 0, 0, shoff, 0, ehsize, phentsize, 0, shentsize, 2, 0)
        if elf_class == 2:
            shdr = struct.pack(order + "IIQQQQIIQQ", 0, 7, 2, 0, note_offset, len(note), 0, 0, 4, 0)
        else:
            shdr = struct.pack(order + "IIIIIIIIII", 0, 7, 2, 0, note_offset, len(note), 0, 0, 4, 0)
        padding = b"\x00" * (shoff - note_offset - len(note))
        return ident + tail + note + padding + b"\x00" * shentsize + shdr + payload

    note_offset = ehsize + phentsize
    tail = struct.pack(order + tail_fmt, 2, 62, 1, 0, ehsize, 0, 0, ehsize, phentsize, 1, shentsize, 0, 0)
    if elf_class == 2:
        phdr = struct.pack(order + "IIQQQQQQ", 4, 4, note_offset, 0, 0, len(note), len(note), 4)
    else:
        phdr = struct.pack(order + "IIIIIIII", 4, note_offset, 0, 0, len(note), len(note), 4, 4)
    return ident + tail + phdr + note + payload


def _align8(value: int) -> int:
    return (value + 7) & ~7


def build_macho(
    uuid_bytes: bytes | None = b"\x22" * 16,
    *,
    is_64: bool = True,
    little_endian: bool = True,
    cputype: int = 0x01000007,
) -> bytes:
    """Return a thin Mach-O image with an optional LC_UUID command."""

    order = "<" if little_endian else ">"
    commands = struct.pack(f"{order}II", 0x19, 16) + b"\x00" * 8
    ncmds = 1
    if uuid_bytes is not None:
        commands += struct.pack(f"{order}II", 0x1B, 24) + uuid_bytes
        ncmds += 1
    if is_64:
        header = struct.pack(f"{order}IiiIIIII", 0xFEEDFACF, cputype, 3, 2, ncmds, len(commands), 0, 0)
    else:
        header = struct.pack(f"{order}IiiIIII", 0xFEEDFACE, cputype, 3, 2, ncmds, len(commands), 0)
    return header + commands


def build_fat_macho(slices: list[tuple[int, bytes]]) -> bytes:
    """Return a universal image from (cputype, thin image) pairs."""

    header = struct.pack(">II", 0xCAFEBABE, len(slices))
    offset = 4096
    entries = b""
    body = b""
    for cputype, image in slices:
        entries += struct.pack(">iiIII", cputype, 3, offset + len(body), len(image), 12)
        body += _pad(image, 4096)
    return _pad(header + entries, 4096) + body


def build_pe(
    guid: bytes | None = b"\x33" * 16,
    *,
    age: int = 1,
    pe32_plus: bool = True,
) -> bytes:
    """Return a one-section PE image with an optional CodeView RSDS record."""

    dos = bytearray(64)
    dos[0:2] = b"MZ"
    struct.pack_into("<I", dos, 0x3C, 64)

    if pe32_plus:
        optional = bytearray(240)
        struct.pack_into("<H", optional, 0, 0x20B)
        count_offset, directories_offset = 108, 112
    else:
        optional = bytearray(224)
        struct.pack_into("<H", optional, 0, 0x10B)
        count_offset, directories_offset = 92, 96
    struct.pack_into("<I", optional, count_offset, 16)

    coff = b"PE\x00\x00" + struct.pack("<HHIIIHH", 0x8664, 1, 0, 0, 0, len(optional), 0x22)
    section = struct.pack("<8sIIIIIIHHI", b".rdata", 0x200, 0x1000, 0x200, 0x400, 0, 0, 0, 0, 0)
    headers = bytes(dos) + coff

    raw = bytearray(0x200)
    if guid is not None:
        record = b"RSDS" + guid + struct.pack("<I", age) + b"app.pdb\x00"
        struct.pack_into("<IIHHIIII", raw, 0, 0, 0, 0, 0, 2, len(record), 0x1000 + 28, 0x400 + 28)
        raw[28 : 28 + len(record)] = record
        struct.pack_into("<II", optional, directories_offset + 8 * 6, 0x1000, 28)

    image = headers + bytes(optional) + section
    return image + b"\x00" * (0x400 - len(image)) + bytes(raw)


@pytest.fixture
def elf_image():
    return build_elf


@pytest.fixture
def macho_image():
    return build_macho


@pytest.fixture
def fat_macho_image():
    return build_fat_macho


@pytest.fixture
def pe_image():
    return build_pe


@pytest.fixture
def plain_executable(tmp_path):
    """Write an executable-like file carrying no build-id metadata."""

    def _write(content: bytes = b"#!/bin/false\n" + bytes(range(256)) * 64, name: str = "app"):
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def fresh_accessor(monkeypatch) -> Generator[None, None, None]:
    """Empty the process-wide identifier slot for the duration of a test."""

    monkeypatch.setattr(accessor, "_REPORT", None)
    yield


@contextmanager
def _capture(level: str):
    messages: list[str] = []

    def _sink(msg):
        if msg.record["level"].name == level:
            messages.append(msg.record["message"])

    logger.enable("build_id")
    sink_id = logger.add(_sink, level=level)
    try:
        yield messages
    finally:
        logger.remove(sink_id)
        logger.disable("build_id")


@pytest.fixture
def capture_loguru():
    """Return a context manager collecting build_id messages of one level."""

    return _capture
