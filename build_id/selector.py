"""Identity source selection.

The chain is an ordered tuple of fallible primary stages followed by one
infallible supplementary stage:

1. ``platform_build_id``: linker-embedded id of the running executable
2. ``executable_image``: the executable's full contents
3. ``type_fingerprint``: interpreter type-identity facts, always appended

The first primary stage that succeeds wins; later primary stages do not run.
Each primary stage works on a scratch copy of the accumulator that is only
committed on success, so a stage failing half way leaves no trace in the
result.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from build_id.common.errors import IdentitySourceUnavailable, log_soft_degrade
from build_id.common.logging import get_logger
from build_id.config import DEFAULT_CONFIG, IdentityConfig
from build_id.executable import hash_executable_image, open_executable
from build_id.fingerprint import write_type_fingerprint
from build_id.formatter import format_identifier
from build_id.hashing import HashAccumulator
from build_id.platform import probe_for_platform

logger = get_logger(__name__)

PLATFORM_BUILD_ID = "platform_build_id"
EXECUTABLE_IMAGE = "executable_image"
TYPE_FINGERPRINT = "type_fingerprint"


@dataclass(slots=True, frozen=True)
class StageResult:
    """Evidence a primary stage committed to the accumulator."""

    source: str
    executable: Path | None = None
    probe: str | None = None


@dataclass(slots=True, frozen=True)
class StageFallback:
    """A primary stage that fell through, with its reason."""

    stage: str
    reason: str


@dataclass(slots=True)
class SelectionOutcome:
    """What the chain fed into the accumulator."""

    primary: StageResult | None = None
    fallbacks: list[StageFallback] = field(default_factory=list)

    @property
    def primary_source(self) -> str | None:
        return self.primary.source if self.primary is not None else None


@dataclass(slots=True, frozen=True)
class BuildIdReport:
    """Build identifier plus the evidence it was derived from."""

    identifier: uuid.UUID
    primary_source: str | None
    executable: Path | None
    probe: str | None
    fallbacks: tuple[StageFallback, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly dictionary for logging/diagnostics."""
        return {
            "identifier": str(self.identifier),
            "primary_source": self.primary_source,
            "executable": str(self.executable) if self.executable is not None else None,
            "probe": self.probe,
            "fallbacks": [{"stage": f.stage, "reason": f.reason} for f in self.fallbacks],
        }


PrimaryStage = Callable[[HashAccumulator, IdentityConfig], StageResult]


def platform_build_id_stage(accumulator: HashAccumulator, config: IdentityConfig) -> StageResult:
    """Feed the linker-embedded build id of the executable.

    Raises:
        IdentitySourceUnavailable: When the platform or image exposes no build id.
    """
    probe = probe_for_platform(config.platform)
    with open_executable(config) as (path, handle):
        raw_id = probe.read_build_id(handle, config.max_metadata_bytes)
    accumulator.write(raw_id)
    logger.debug("Using {} build id {} of {}", probe.name, raw_id.hex(), path)
    return StageResult(PLATFORM_BUILD_ID, executable=path, probe=probe.name)


def executable_image_stage(accumulator: HashAccumulator, config: IdentityConfig) -> StageResult:
    """Feed the complete executable image.

    Raises:
        IdentitySourceUnavailable: When no executable file can be read.
    """
    path = hash_executable_image(accumulator, config)
    logger.debug("Hashed executable image {}", path)
    return StageResult(EXECUTABLE_IMAGE, executable=path)


def type_fingerprint_stage(accumulator: HashAccumulator, config: IdentityConfig) -> None:
    """Feed the interpreter type-identity fingerprint. Never fails."""
    write_type_fingerprint(accumulator)


PRIMARY_STAGES: tuple[PrimaryStage, ...] = (platform_build_id_stage, executable_image_stage)
_STAGE_NAMES: dict[PrimaryStage, str] = {
    platform_build_id_stage: PLATFORM_BUILD_ID,
    executable_image_stage: EXECUTABLE_IMAGE,
}


def run_primary_stages(
    accumulator: HashAccumulator,
    config: IdentityConfig,
    stages: tuple[PrimaryStage, ...] = PRIMARY_STAGES,
) -> tuple[HashAccumulator, SelectionOutcome]:
    """Run primary stages until the first success.

    Returns:
        tuple[HashAccumulator, SelectionOutcome]: The committed accumulator
        (the input one when every stage failed) and the outcome record.
    """
    outcome = SelectionOutcome()
    for index, stage in enumerate(stages):
        scratch = accumulator.copy()
        try:
            outcome.primary = stage(scratch, config)
        except IdentitySourceUnavailable as exc:
            name = _STAGE_NAMES.get(stage, exc.stage)
            remaining = stages[index + 1 :]
            next_name = _STAGE_NAMES.get(remaining[0], "next stage") if remaining else TYPE_FINGERPRINT
            log_soft_degrade(name, exc.reason, next_name)
            outcome.fallbacks.append(StageFallback(name, exc.reason))
            continue
        return scratch, outcome
    return accumulator, outcome


def select_sources(
    accumulator: HashAccumulator,
    config: IdentityConfig = DEFAULT_CONFIG,
    stages: tuple[PrimaryStage, ...] = PRIMARY_STAGES,
) -> tuple[HashAccumulator, SelectionOutcome]:
    """Run the whole chain: first successful primary stage, then the fingerprint."""

    committed, outcome = run_primary_stages(accumulator, config, stages)
    type_fingerprint_stage(committed, config)
    return committed, outcome


def calculate_report(
    config: IdentityConfig = DEFAULT_CONFIG,
    stages: tuple[PrimaryStage, ...] = PRIMARY_STAGES,
) -> BuildIdReport:
    """Compute the build identifier without caching, with diagnostics."""

    accumulator, outcome = select_sources(HashAccumulator(), config, stages)
    identifier = format_identifier(accumulator, config.discriminator)
    primary = outcome.primary
    return BuildIdReport(
        identifier=identifier,
        primary_source=outcome.primary_source,
        executable=primary.executable if primary is not None else None,
        probe=primary.probe if primary is not None else None,
        fallbacks=tuple(outcome.fallbacks),
    )


def calculate(config: IdentityConfig = DEFAULT_CONFIG) -> uuid.UUID:
    """Compute the build identifier without caching."""

    return calculate_report(config).identifier


__all__ = [
    "EXECUTABLE_IMAGE",
    "PLATFORM_BUILD_ID",
    "PRIMARY_STAGES",
    "TYPE_FINGERPRINT",
    "BuildIdReport",
    "SelectionOutcome",
    "StageFallback",
    "StageResult",
    "calculate",
    "calculate_report",
    "executable_image_stage",
    "platform_build_id_stage",
    "run_primary_stages",
    "select_sources",
    "type_fingerprint_stage",
]
