"""Defaults for relation reconciliation."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_flag

DEFAULT_PAYLOAD_IDENTITY_FIELD = "id"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    validate_before_save: bool = True
    payload_identity_field: str = DEFAULT_PAYLOAD_IDENTITY_FIELD


def get_reconcile_config() -> ReconcileConfig:
    identity_field = os.getenv("RELSYNC_PAYLOAD_IDENTITY_FIELD", "").strip()
    return ReconcileConfig(
        validate_before_save=env_flag("RELSYNC_VALIDATE_BEFORE_SAVE", default=True),
        payload_identity_field=identity_field or DEFAULT_PAYLOAD_IDENTITY_FIELD,
    )
