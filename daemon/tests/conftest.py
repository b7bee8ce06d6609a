"""Shared test fixtures for all tests."""

import sys
from pathlib import Path

import pytest

# Add src (and this directory, for fixtures/) to path for absolute imports
tests_path = Path(__file__).parent
sys.path.insert(0, str(tests_path.parent / "src"))
sys.path.insert(0, str(tests_path))

from feedbell_daemon import observability
from feedbell_daemon.models import NotificationStyle
from feedbell_daemon.registry import DestinationRegistry
from feedbell_daemon.watermark import WatermarkStore


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path, monkeypatch) -> Path:
    """Point every XDG directory at a temp dir and reset the event log."""
    for name in ("XDG_CONFIG_HOME", "XDG_DATA_HOME", "XDG_STATE_HOME"):
        directory = tmp_path / "xdg" / name.lower()
        directory.mkdir(parents=True, exist_ok=True)
        monkeypatch.setenv(name, str(directory))
    for name in ("DISCORD_TOKEN", "RSS_URL", "YOUTUBE_CHANNEL_ID"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(observability, "_event_log", None)
    return tmp_path / "xdg"


@pytest.fixture
def state_dir(tmp_path) -> Path:
    """Directory for watermark records."""
    return tmp_path / "state"


@pytest.fixture
def store(state_dir) -> WatermarkStore:
    return WatermarkStore(state_dir)


@pytest.fixture
def registry(tmp_path) -> DestinationRegistry:
    return DestinationRegistry(tmp_path / "data" / "channels.json")


@pytest.fixture
def styles() -> dict:
    return {
        "rss": NotificationStyle(color=0x00FF00, footer="News"),
        "youtube": NotificationStyle(color=0xFF0000, footer="Video"),
    }
