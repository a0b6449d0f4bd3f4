"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import RecordStore
from .records import RecordLike

__all__ = ["RecordLike", "RecordStore"]
