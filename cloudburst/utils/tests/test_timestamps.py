#!/usr/bin/env python3
# cloudburst/utils/tests/test_timestamps.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

from datetime import datetime, timezone

import pytest

from cloudburst.utils.timestamps import to_epoch_millis, to_epoch_seconds, to_iso


@pytest.mark.parametrize("value,expected", [
    ("2024-01-01T00:00:00Z", 1704067200.0),
    ("2024-01-01T05:30:00+05:30", 1704067200.0),
    ("2024-01-01T00:00:00", 1704067200.0),
    ("2024-01-01T00:00:00.5Z", 1704067200.5),
    ("2024-01-01T00:00:00.12Z", 1704067200.12),
    ("2024-01-01T00:00:00.1234567+00:00", 1704067200.123456),
    (1704067200000, 1704067200.0),
    ("1704067200000", 1704067200.0),
    (datetime(2024, 1, 1, tzinfo=timezone.utc), 1704067200.0),
])
def test_to_epoch_seconds(value, expected):
    assert to_epoch_seconds(value) == expected


@pytest.mark.parametrize("value", [None, "", "not a date", float('nan'), True, -5])
def test_unparseable_returns_default(value):
    assert to_epoch_seconds(value) is None
    assert to_epoch_seconds(value, default=42.0) == 42.0


def test_to_iso():
    assert to_iso(1704067200.5) == "2024-01-01T00:00:00.500Z"
    assert to_iso(None) is None


def test_to_epoch_millis():
    assert to_epoch_millis(1704067200.5) == 1704067200500
