"""Lockfile core class — lookup and deterministic serialization.

The ``LockFile`` is an immutable mapping from mod reference to
``LockedMod``. A resolution never edits a lockfile in place: it builds a
fresh one that replaces the old on success.

Determinism guarantee: ``to_json()`` output is byte-identical for equal
content. Entries are sorted by mod reference, keys within each entry are
sorted, and no timestamps are embedded.

On-disk format::

    {
      "SML": {"hash": "…", "link": "https://…", "version": "3.6.1"},
      "MyLocalMod": {"hash": "", "link": "", "version": "1.0.0"}
    }
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from modpin.core.lockfile.models import LockedMod
from modpin.exceptions import LockfileError
from modpin.fileio import atomic_write_text


class LockFile(Mapping[str, LockedMod]):
    """Resolved mod set, keyed by mod reference.

    Example::

        lf = LockFile([LockedMod("SML", Version.parse("3.6.1"), hash, link)])
        lf.write(Path("mods-lock.json"))
    """

    def __init__(self, mods: Iterable[LockedMod] = ()) -> None:
        entries: dict[str, LockedMod] = {}
        for mod in mods:
            if mod.mod_reference in entries:
                raise LockfileError(
                    f"Duplicate lockfile entry for {mod.mod_reference!r}",
                    mod_reference=mod.mod_reference,
                )
            entries[mod.mod_reference] = mod
        self._mods = dict(sorted(entries.items()))

    # -- Mapping protocol ---------------------------------------------------

    def __getitem__(self, mod_reference: str) -> LockedMod:
        return self._mods[mod_reference]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mods)

    def __len__(self) -> int:
        return len(self._mods)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LockFile):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{ref}@{m.version}" for ref, m in self._mods.items())
        return f"LockFile({inner})"

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the on-disk dict shape, sorted by mod reference."""
        return {ref: mod.to_dict() for ref, mod in self._mods.items()}

    def to_json(self, indent: int = 2) -> str:
        """Serialize to deterministic JSON text (with trailing newline)."""
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True) + "\n"

    def write(self, path: Path) -> None:
        """Atomically write the lockfile as JSON.

        Readers see either the old lockfile or the complete new one.

        Raises:
            LockfileError: If the file cannot be written.
        """
        path = Path(path)
        try:
            atomic_write_text(path, self.to_json())
        except OSError as exc:
            raise LockfileError(
                f"Failed writing lockfile {path}: {exc}", path=str(path)
            ) from exc
