"""Shared test fixtures for memogalaxy."""

import os
import tempfile
from datetime import UTC, datetime, timedelta

import pytest

from memogalaxy.diary import Entry


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": os.path.join(tmp_dir, "data"),
            "entries_dir": os.path.join(tmp_dir, "data", "entries"),
        },
        "logging": {"level": "INFO"},
        "display": {"date_format": "%d/%m/%Y"},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def entries_dir(tmp_path):
    d = tmp_path / "entries"
    d.mkdir()
    return d


@pytest.fixture
def make_entry():
    """Build entries with predictable ids and timestamps.

    ``make_entry("1", day=1)`` is created on 2025-05-01 at noon UTC.
    """

    def _make(entry_id: str, *, day: int = 1, title: str = "", **overrides) -> Entry:
        fields = {
            "id": entry_id,
            "title": title or f"Entry {entry_id}",
            "content": f"Body of entry {entry_id}",
            "mood": "😊",
            "created_at": datetime(2025, 5, 1, 12, tzinfo=UTC) + timedelta(days=day - 1),
        }
        fields.update(overrides)
        return Entry(**fields)

    return _make
