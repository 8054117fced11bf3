"""Shared fixtures."""

from datetime import datetime

import pytest

from sn_report import settings


@pytest.fixture
def now():
    return datetime(2025, 11, 26, 14, 30, 0)


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture(autouse=True)
def isolated_output(tmp_path, monkeypatch):
    """Keep every file the code writes inside the test's tmp dir."""
    monkeypatch.setattr(settings, "OUTPUT_DIR", tmp_path / "output")
    monkeypatch.setattr(settings, "LOG_DIR", tmp_path / "logs")
    return tmp_path / "output"
