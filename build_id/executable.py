"""Locate and read the image of the running executable.

Resolution order:

1. explicit override from :class:`~build_id.config.IdentityConfig`
2. ``/proc/self/exe`` when the kernel exposes it (still valid if the file on
   disk was replaced after launch)
3. ``sys.executable`` (the frozen application binary when packaged)

Sandboxed targets (emscripten, wasi) never have an addressable image.
"""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from build_id.common.errors import ExecutableUnreadable
from build_id.config import DEFAULT_CONFIG, IdentityConfig

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import BinaryIO

    from build_id.hashing import HashAccumulator

PROC_SELF_EXE = Path("/proc/self/exe")


def _candidate_paths(config: IdentityConfig) -> list[Path]:
    if config.executable is not None:
        return [Path(config.executable)]
    candidates: list[Path] = []
    if config.platform.startswith("linux") and os.path.exists(PROC_SELF_EXE):
        candidates.append(PROC_SELF_EXE)
    if sys.executable:
        candidates.append(Path(sys.executable))
    return candidates


def resolve_executable_path(config: IdentityConfig = DEFAULT_CONFIG) -> Path:
    """Return the path of the running executable image.

    Raises:
        ExecutableUnreadable: On sandboxed platforms or when no candidate is a file.
    """
    if config.sandboxed:
        raise ExecutableUnreadable(f"platform {config.platform!r} has no executable image")

    for candidate in _candidate_paths(config):
        if candidate.is_file():
            return candidate
    raise ExecutableUnreadable("no addressable executable file for this process")


@contextmanager
def open_executable(config: IdentityConfig = DEFAULT_CONFIG) -> Iterator[tuple[Path, BinaryIO]]:
    """Open the running executable for binary reading.

    Yields:
        tuple[Path, BinaryIO]: Resolved path and open handle, closed on exit.
    """
    path = resolve_executable_path(config)
    try:
        handle = open(path, "rb")  # noqa: SIM115 - closed in finally
    except OSError as exc:
        raise ExecutableUnreadable(f"cannot open {path}: {exc}") from exc
    try:
        yield path, handle
    finally:
        handle.close()


def hash_executable_image(accumulator: HashAccumulator, config: IdentityConfig = DEFAULT_CONFIG) -> Path:
    """Stream the whole executable image into ``accumulator``.

    Returns:
        Path: The path that was read.
    """
    with open_executable(config) as (path, handle):
        try:
            accumulator.consume(handle, config.chunk_size)
        except OSError as exc:
            raise ExecutableUnreadable(f"read of {path} failed: {exc}") from exc
    return path


__all__ = [
    "PROC_SELF_EXE",
    "hash_executable_image",
    "open_executable",
    "resolve_executable_path",
]
