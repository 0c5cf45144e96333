"""Cross-process stability of the build identifier."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import uuid
from pathlib import Path

import build_id

REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(*args: str) -> str:
    env = dict(os.environ, PYTHONPATH=str(REPO_ROOT))
    result = subprocess.run(
        [sys.executable, *args],
        capture_output=True,
        text=True,
        check=True,
        env=env,
        cwd=REPO_ROOT,
    )
    return result.stdout.strip()


def test_two_invocations_agree_with_each_other_and_this_process():
    script = "import build_id; print(build_id.get_build_identifier())"
    first = _run("-c", script)
    second = _run("-c", script)

    assert first == second
    assert uuid.UUID(first) == build_id.get()


def test_module_entry_point_prints_same_identifier():
    assert _run("-m", "build_id") == str(build_id.get())


def test_module_entry_point_json_report():
    report = json.loads(_run("-m", "build_id", "--json"))
    assert report["identifier"] == str(build_id.get())
    assert report == build_id.get_build_report().to_dict()
