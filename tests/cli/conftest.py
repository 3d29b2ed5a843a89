"""Shared fixtures for CLI tests.

Every CLI invocation gets an isolated ``--local-dir`` and a registry
snapshot file, so tests never touch the user's real profiles or the
network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
from click.testing import CliRunner, Result

from modpin.cli.main import cli

SNAPSHOT = """\
mods:
  A:
    - version: 1.0.0
    - version: 1.2.0
      dependencies:
        B: ">=2.0.0"
    - version: 2.0.0
  B:
    - version: 1.9.0
    - version: 2.1.0
    - version: 2.2.0
  C:
    - version: 1.0.0
      dependencies:
        E: ">=3.0.0"
  D:
    - version: 1.0.0
      dependencies:
        E: "<2.0.0"
  E:
    - version: 1.0.0
    - version: 3.0.0
"""

Invoke = Callable[..., Result]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.yaml"
    path.write_text(SNAPSHOT, encoding="utf-8")
    return path


@pytest.fixture
def local_dir(tmp_path: Path) -> Path:
    return tmp_path / "local"


@pytest.fixture
def invoke(runner: CliRunner, local_dir: Path, snapshot_file: Path) -> Invoke:
    """Run ``modpin`` with isolated state; extra args follow the globals."""

    def _invoke(*args: str, global_args: tuple[str, ...] = ()) -> Result:
        return runner.invoke(
            cli,
            [
                "--local-dir", str(local_dir),
                "--registry-file", str(snapshot_file),
                *global_args,
                *args,
            ],
        )

    return _invoke


@pytest.fixture
def registered_game(invoke: Invoke, game_dir: Path) -> Path:
    """``game_dir`` registered under the Default profile, which requires A ^1.0.0."""
    assert invoke("profile", "add", "Default", "A", "^1.0.0").exit_code == 0
    assert invoke("installation", "add", str(game_dir)).exit_code == 0
    return game_dir
