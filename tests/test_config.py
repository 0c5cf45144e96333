"""Tests for identity calculation configuration."""

from __future__ import annotations

import dataclasses
import sys

import pytest

from build_id.config import DEFAULT_CONFIG, IdentityConfig


def test_defaults_follow_running_platform():
    assert DEFAULT_CONFIG.platform == sys.platform
    assert DEFAULT_CONFIG.executable is None
    assert DEFAULT_CONFIG.discriminator == 0


@pytest.mark.parametrize("platform", ["emscripten", "wasi"])
def test_sandboxed_platforms(platform):
    assert IdentityConfig(platform=platform).sandboxed


def test_native_platform_is_not_sandboxed():
    assert not IdentityConfig(platform="linux").sandboxed


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.chunk_size = 1  # type: ignore[misc]


def test_invalid_parameters_raise_clear_value_errors():
    with pytest.raises(ValueError, match="chunk_size must be >= 1"):
        IdentityConfig(chunk_size=0)
    with pytest.raises(ValueError, match="max_metadata_bytes must be >= 64"):
        IdentityConfig(max_metadata_bytes=10)
    with pytest.raises(ValueError, match="discriminator must be in range"):
        IdentityConfig(discriminator=256)


def test_replace_derives_validated_variant(tmp_path):
    derived = dataclasses.replace(DEFAULT_CONFIG, executable=tmp_path / "app")
    assert derived.executable == tmp_path / "app"
    assert derived.chunk_size == DEFAULT_CONFIG.chunk_size
