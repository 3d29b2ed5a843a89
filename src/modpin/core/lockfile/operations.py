"""Lockfile operations — deserialization, validation, and diffing.

This module extends the ``LockFile`` class (defined in ``lockfile.py``) with
classmethods and instance methods for:

- **Deserialization:** ``from_dict``, ``from_json``, ``read`` (disk).
- **Validation:** hash format and entry consistency checks.
- **Diffing:** structured comparison of two lockfiles.

These are attached to the ``LockFile`` class at import time (in
``__init__.py``) to keep each source file focused while presenting a
single unified API to callers.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from modpin.core.dependency.version import Version
from modpin.core.lockfile.models import LockedMod, _HASH_RE
from modpin.exceptions import LockfileError


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    """Deserialize a lockfile from a dict (parsed JSON).

    Missing ``hash`` or ``link`` fields default to the empty string, which
    keeps hand-written lockfiles for local mods short.

    Raises:
        LockfileError: If the data is not a mapping of mod -> entry, or an
            entry carries an invalid version.
    """
    if not isinstance(data, dict):
        raise LockfileError("Lockfile root must be a JSON object")

    mods: list[LockedMod] = []
    for ref, entry in data.items():
        if not isinstance(entry, dict) or "version" not in entry:
            raise LockfileError(
                f"Lockfile entry {ref!r} must be an object with a version",
                mod_reference=ref,
            )
        try:
            version = Version.parse(str(entry["version"]))
        except ValueError as exc:
            raise LockfileError(
                f"Lockfile entry {ref!r}: {exc}", mod_reference=ref
            ) from exc
        mods.append(
            LockedMod(
                mod_reference=ref,
                version=version,
                hash=str(entry.get("hash") or ""),
                link=str(entry.get("link") or ""),
            )
        )
    return cls(mods)


def _from_json(cls: type, json_str: str) -> Any:
    """Deserialize from a JSON string.

    Raises:
        LockfileError: If the string is not valid JSON or not a lockfile.
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as exc:
        raise LockfileError(f"Lockfile is not valid JSON: {exc}") from exc
    return cls.from_dict(data)


def _read(cls: type, path: Path) -> Any:
    """Read a lockfile from disk.

    A missing file is not an error: it reads as an empty lockfile, meaning
    "nothing locked yet".

    Raises:
        LockfileError: If the file exists but cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return cls()
    except OSError as exc:
        raise LockfileError(
            f"Failed reading lockfile {path}: {exc}", path=str(path)
        ) from exc
    return cls.from_json(text)


def _validate(self: Any) -> list[str]:
    """Validate the lockfile for internal consistency.

    Checks:

    1. **Hash format:** every non-empty hash is a lowercase hex SHA-256.
    2. **Fetchability:** an entry with a link must carry a hash, otherwise
       the download cannot be verified.

    Returns:
        List of validation error messages. Empty means the lockfile is
        valid.
    """
    errors: list[str] = []
    for ref, mod in self.items():
        if mod.hash and not _HASH_RE.match(mod.hash):
            errors.append(f"Mod {ref!r} has invalid hash format: {mod.hash!r}")
        if mod.link and not mod.hash:
            errors.append(f"Mod {ref!r} has a download link but no hash")
    return errors


def _diff(self: Any, other: Any) -> dict[str, Any]:
    """Compare two lockfiles and return differences.

    - **added**: Mods present in ``other`` but not in ``self``.
    - **removed**: Mods present in ``self`` but not in ``other``.
    - **changed**: Mods present in both with a different version, hash,
      or link.

    Args:
        other: The lockfile to compare against (typically the newer one).

    Returns:
        Dict with keys 'added', 'removed', 'changed'.
    """
    self_names = set(self)
    other_names = set(other)

    changes: list[dict[str, Any]] = []
    for name in sorted(self_names & other_names):
        old = self[name]
        new = other[name]
        for field_name in ("version", "hash", "link"):
            old_value = str(getattr(old, field_name))
            new_value = str(getattr(new, field_name))
            if old_value != new_value:
                changes.append({
                    "name": name,
                    "field": field_name,
                    "old": old_value,
                    "new": new_value,
                })

    return {
        "added": sorted(other_names - self_names),
        "removed": sorted(self_names - other_names),
        "changed": changes,
    }
