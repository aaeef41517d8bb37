"""Shared fixtures: a temporary data directory and settings pointing at it."""

from __future__ import annotations

import pytest

from app.config import Settings
from geo_fixtures import default_datasets, write_datasets


@pytest.fixture
def data_dir(tmp_path):
    return write_datasets(tmp_path / "data", default_datasets())


@pytest.fixture
def settings(data_dir, tmp_path):
    return Settings(
        _env_file=None,
        data_path=str(data_dir),
        output_path=tmp_path / "out" / "map.html",
        icons_dir=tmp_path / "icons",
    )
