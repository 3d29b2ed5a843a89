"""Small JSON file helpers shared by the stores."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from modpin.fileio import atomic_write_text


def read_json(path: Path) -> Any | None:
    """Parse *path* as JSON, or return None if the file does not exist.

    Raises:
        OSError: If the file exists but cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    return json.loads(text)


def write_json(path: Path, data: Any) -> None:
    """Atomically replace *path* with *data* rendered as indented JSON."""
    atomic_write_text(path, json.dumps(data, indent=2) + "\n")
