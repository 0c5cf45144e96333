"""Platform build-id probes.

One probe per binary format family plus an explicit unsupported probe.
:func:`probe_for_platform` maps a ``sys.platform`` value to its probe so the
selector never branches on the platform itself.

Usage
-----
```python
from build_id.platform import probe_for_platform

probe = probe_for_platform("linux")
with open("/proc/self/exe", "rb") as handle:
    raw_id = probe.read_build_id(handle, max_bytes=1 << 20)
```
"""

from __future__ import annotations

import sys

from build_id.platform.base import BuildIdProbe
from build_id.platform.elf import ElfProbe
from build_id.platform.macho import MachOProbe
from build_id.platform.pe import PeProbe
from build_id.platform.unsupported import UnsupportedProbe

# sys.platform prefixes in lookup order; the first match wins.
_PLATFORM_PREFIXES: tuple[tuple[str, type], ...] = (
    ("linux", ElfProbe),
    ("freebsd", ElfProbe),
    ("openbsd", ElfProbe),
    ("netbsd", ElfProbe),
    ("dragonfly", ElfProbe),
    ("sunos", ElfProbe),
    ("aix", UnsupportedProbe),
    ("darwin", MachOProbe),
    ("ios", MachOProbe),
    ("win32", PeProbe),
    ("cygwin", PeProbe),
    ("msys", PeProbe),
)


def probe_for_platform(platform: str | None = None) -> BuildIdProbe:
    """Return the build-id probe for a ``sys.platform`` style tag.

    Parameters
    ----------
    platform : str, optional
        Platform tag; defaults to ``sys.platform``.

    Returns
    -------
    BuildIdProbe
        Format-specific probe, or :class:`UnsupportedProbe` for anything
        unknown (emscripten, wasi, ...).
    """
    tag = sys.platform if platform is None else platform
    for prefix, probe_cls in _PLATFORM_PREFIXES:
        if tag.startswith(prefix):
            if probe_cls is UnsupportedProbe:
                return UnsupportedProbe(tag)
            return probe_cls()
    return UnsupportedProbe(tag)


__all__ = [
    "BuildIdProbe",
    "ElfProbe",
    "MachOProbe",
    "PeProbe",
    "UnsupportedProbe",
    "probe_for_platform",
]
