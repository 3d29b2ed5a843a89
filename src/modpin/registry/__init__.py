"""Mod registry clients.

Provides the abstract ``RegistryClient`` the resolution engine depends on,
plus two concrete clients: a remote HTTP/JSON registry and an in-memory
snapshot registry for offline use.

Public API::

    from modpin.registry import RegistryClient, ModVersion, ModDependency
    from modpin.registry.remote import RemoteRegistry
    from modpin.registry.snapshot import SnapshotRegistry
"""

from __future__ import annotations

from modpin.registry.base import ModDependency, ModVersion, RegistryClient

__all__ = [
    "ModDependency",
    "ModVersion",
    "RegistryClient",
]
