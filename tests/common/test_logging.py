from __future__ import annotations

import logging
from typing import Any

import pytest

from relsync.common.logging import configure_logging


def test_configure_logging_passes_defaults_to_basic_config(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[dict[str, Any]] = []

    def fake_basic_config(**kwargs: Any) -> None:
        calls.append(kwargs)

    monkeypatch.setattr(logging, "basicConfig", fake_basic_config)

    configure_logging()
    configure_logging(level=logging.DEBUG, force=True)

    assert [(call["level"], call["force"]) for call in calls] == [
        (logging.INFO, False),
        (logging.DEBUG, True),
    ]
    assert calls[0]["format"] == "%(asctime)s %(levelname)s [%(name)s] %(message)s"
