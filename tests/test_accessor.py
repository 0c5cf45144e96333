"""Tests for the process-wide memoized build identifier."""

from __future__ import annotations

import threading
import time
import uuid

import build_id
from build_id import accessor
from build_id.formatter import has_valid_layout
from build_id.selector import calculate


def test_accessor_matches_direct_calculation():
    direct = calculate()
    assert build_id.get_build_identifier() == direct
    assert build_id.get_build_identifier() == direct
    assert build_id.get_build_identifier() == direct


def test_get_alias_returns_same_value():
    assert build_id.get() == build_id.get_build_identifier()
    assert build_id.get() is build_id.get_build_identifier()


def test_identifier_is_valid_uuid():
    identifier = build_id.get()
    assert isinstance(identifier, uuid.UUID)
    assert has_valid_layout(identifier)
    assert uuid.UUID(str(identifier)) == identifier


def test_report_holds_cached_identifier():
    assert build_id.get_build_report().identifier == build_id.get()


def test_computed_once_on_first_access(fresh_accessor, monkeypatch):
    calls = []
    real = accessor.calculate_report

    def _counting():
        calls.append(1)
        return real()

    monkeypatch.setattr(accessor, "calculate_report", _counting)

    first = accessor.get_build_identifier()
    for _ in range(5):
        assert accessor.get_build_identifier() == first
    assert len(calls) == 1


def test_concurrent_first_access_computes_once(fresh_accessor, monkeypatch):
    """Racing threads block on the gate and all observe the same value."""
    calls = []
    real = accessor.calculate_report

    def _slow():
        calls.append(1)
        time.sleep(0.05)
        return real()

    monkeypatch.setattr(accessor, "calculate_report", _slow)

    start = threading.Barrier(16)
    results: list[uuid.UUID] = []
    results_lock = threading.Lock()

    def _worker():
        start.wait()
        value = accessor.get_build_identifier()
        with results_lock:
            results.append(value)

    threads = [threading.Thread(target=_worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1
    assert len(results) == 16
    assert len(set(results)) == 1


def test_cached_value_is_not_recomputed_after_environment_changes(fresh_accessor, monkeypatch):
    """Once stored, the identifier is immune to later changes in the process."""
    first = accessor.get_build_identifier()
    monkeypatch.setattr("sys.executable", "")
    assert accessor.get_build_identifier() == first
