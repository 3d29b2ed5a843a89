"""modpin: Profile-based mod management with reproducible lockfiles."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
