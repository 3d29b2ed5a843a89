"""JSON persistence for profiles and installations.

Public API::

    from modpin.store import ProfileStore, InstallationStore, Installation
"""

from __future__ import annotations

from modpin.store.installations import Installation, InstallationStore, Platform
from modpin.store.profiles import ProfileStore

__all__ = [
    "Installation",
    "InstallationStore",
    "Platform",
    "ProfileStore",
]
