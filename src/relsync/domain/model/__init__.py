"""Public record primitive surface."""

from __future__ import annotations

from relsync.domain.model.record import (
    RECORD_ERROR_KEY,
    AttributeMap,
    BaseRecord,
    ErrorMap,
    configure_store,
    current_store,
    is_blank_identity,
)

__all__ = [
    "RECORD_ERROR_KEY",
    "AttributeMap",
    "BaseRecord",
    "ErrorMap",
    "configure_store",
    "current_store",
    "is_blank_identity",
]
