"""Mod Lockfile — Reproducible, Reconciled Mod Installations.

This package implements the lockfile written next to each game
installation. The lockfile captures one concrete installable set: every
required mod at its resolved version, with the content hash and download
link needed to materialize it.

The package is split into focused submodules:

- ``models``: The ``LockedMod`` data class.
- ``lockfile``: The immutable ``LockFile`` mapping and its deterministic
  serialization and atomic write.
- ``operations``: Deserialization (``from_dict``, ``from_json``, ``read``),
  validation, and diffing.
- ``reconcile``: Merging a fresh resolution with the prior lockfile.

All public names are re-exported here so that imports like
``from modpin.core.lockfile import LockFile`` work regardless of layout.
"""

from modpin.core.lockfile.models import LockedMod
from modpin.core.lockfile.lockfile import LockFile

# Attach operations to LockFile as methods/classmethods
from modpin.core.lockfile import operations as _ops

LockFile.from_dict = classmethod(_ops._from_dict)
LockFile.from_json = classmethod(_ops._from_json)
LockFile.read = classmethod(_ops._read)
LockFile.validate = _ops._validate
LockFile.diff = _ops._diff

from modpin.core.lockfile.reconcile import reconcile, resolve_lockfile  # noqa: E402

__all__ = [
    "LockFile",
    "LockedMod",
    "reconcile",
    "resolve_lockfile",
]
