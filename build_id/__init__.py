"""Obtain a UUID uniquely representing the build of the running binary.

Two processes can compare their identifiers to learn whether they are
invocations of the same executable. The identifier comes from the first
available source of:

1. the linker-embedded build id (``.note.gnu.build-id``, ``LC_UUID``, CodeView)
2. a hash of the whole executable image

with an interpreter type-identity fingerprint always mixed in.

Example:
    >>> import build_id
    >>> remote = build_id.get()
    >>> build_id.get() == remote
    True
"""

from loguru import logger

from build_id.accessor import get, get_build_identifier, get_build_report
from build_id.config import DEFAULT_CONFIG, IdentityConfig
from build_id.selector import BuildIdReport, calculate, calculate_report

logger.disable(__name__)

__version__ = "0.2.1"

__all__ = [
    "DEFAULT_CONFIG",
    "BuildIdReport",
    "IdentityConfig",
    "calculate",
    "calculate_report",
    "get",
    "get_build_identifier",
    "get_build_report",
]
