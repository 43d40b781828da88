from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch, tmp_path: Path):
    monkeypatch.setattr(
        'vmput.config.default_settings_path',
        lambda: tmp_path / 'no-user-config.toml',
    )
    yield
    # run() points loguru at the captured stderr of the current test.
    logger.remove()
