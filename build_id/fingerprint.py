"""Interpreter type-identity fingerprint.

Last stage of the identity chain and the only infallible one. It feeds facts
the interpreter build fixes about a handful of canonical types into the
accumulator:

- the unit type (``NoneType``) and a small value type (``bool``): qualified
  name, instance layout sizes and type flags
- two distinct anonymous functions: bytecode, code flags, argument count and
  stack size
- implementation name, bytecode cache tag and ``sys.hexversion``

Nothing here depends on ``hash()`` (salted per process) or ``id()`` (address
dependent), so the output is stable across runs of the same interpreter build.
It is identical for every program run by that interpreter build, which makes it
a weak signal only.
"""

from __future__ import annotations

import sys
from types import CodeType

from build_id.hashing import HashAccumulator

CANONICAL_TYPES: tuple[type, ...] = (type(None), bool)

# Py_TPFLAGS_READYING and Py_TPFLAGS_VALID_VERSION_TAG change while the process runs.
_RUNTIME_TYPE_FLAGS = (1 << 13) | (1 << 19)

_unit_identity = lambda x: x  # noqa: E731
_byte_identity = lambda x: x & 0xFF  # noqa: E731

CANONICAL_CODE: tuple[CodeType, ...] = (_unit_identity.__code__, _byte_identity.__code__)


def _write_type(accumulator: HashAccumulator, cls: type) -> None:
    accumulator.write_str(f"{cls.__module__}.{cls.__qualname__}")
    accumulator.write_u64(getattr(cls, "__basicsize__", 0))
    accumulator.write_u64(getattr(cls, "__itemsize__", 0))
    accumulator.write_u64(getattr(cls, "__flags__", 0) & ~_RUNTIME_TYPE_FLAGS)


def _write_code(accumulator: HashAccumulator, code: CodeType) -> None:
    accumulator.write_u64(len(code.co_code))
    accumulator.write(code.co_code)
    accumulator.write_u64(code.co_flags)
    accumulator.write_u64(code.co_argcount)
    accumulator.write_u64(code.co_stacksize)


def write_type_fingerprint(accumulator: HashAccumulator) -> None:
    """Append the type-identity fingerprint to ``accumulator``."""

    for cls in CANONICAL_TYPES:
        _write_type(accumulator, cls)
    for code in CANONICAL_CODE:
        _write_code(accumulator, code)

    implementation = sys.implementation
    accumulator.write_str(implementation.name)
    accumulator.write_str(getattr(implementation, "cache_tag", None) or "")
    accumulator.write_u64(sys.hexversion)


__all__ = ["CANONICAL_CODE", "CANONICAL_TYPES", "write_type_fingerprint"]
