"""Unit tests for Config loading and validation."""

from pathlib import Path

import pytest

from feedbell_daemon.config import Config, expand_env_var
from feedbell_daemon.defaults import DEFAULT_CONFIG_TOML, ensure_config


def write_config(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(content)
    return path


def test_expand_env_var(monkeypatch) -> None:
    """Test env: references and empty values."""
    monkeypatch.setenv("FEEDBELL_TEST_VALUE", "resolved")

    assert expand_env_var("env:FEEDBELL_TEST_VALUE") == "resolved"
    assert expand_env_var("env:FEEDBELL_UNSET_VALUE") is None
    assert expand_env_var("literal") == "literal"
    assert expand_env_var("") is None
    assert expand_env_var(None) is None


def test_defaults_from_empty_dict(isolated_xdg) -> None:
    """Test that every section is optional."""
    config = Config.from_dict({})

    assert config.poll_interval == 10
    assert config.request_timeout == 30
    assert config.delivery_workers == 4
    assert config.api_port == 3000
    assert config.rss_url is None
    assert config.data_dir == isolated_xdg / "xdg_data_home" / "feedbell"
    assert config.registry_path.name == "channels.json"


def test_env_values_fill_feeds_and_token(monkeypatch, tmp_path) -> None:
    """Test the default env: references used by the shipped config."""
    monkeypatch.setenv("DISCORD_TOKEN", "token-123")
    monkeypatch.setenv("RSS_URL", "https://example.com/feed")
    monkeypatch.setenv("YOUTUBE_CHANNEL_ID", "UC123")

    config = Config.from_file(write_config(tmp_path, DEFAULT_CONFIG_TOML))

    assert config.discord_token == "token-123"
    assert config.rss_url == "https://example.com/feed"
    assert config.youtube_channel_id == "UC123"


def test_missing_token_fails_validation(monkeypatch, tmp_path) -> None:
    """Test that the daemon refuses to start without a token."""
    monkeypatch.setenv("RSS_URL", "https://example.com/feed")

    with pytest.raises(ValueError, match="Discord token"):
        Config.from_file(write_config(tmp_path, DEFAULT_CONFIG_TOML))


def test_no_feeds_fails_validation(monkeypatch, tmp_path) -> None:
    """Test that at least one feed must be configured."""
    monkeypatch.setenv("DISCORD_TOKEN", "token-123")

    with pytest.raises(ValueError, match="No feeds"):
        Config.from_file(write_config(tmp_path, DEFAULT_CONFIG_TOML))


def test_invalid_interval(tmp_path) -> None:
    """Test interval range validation."""
    content = """
[daemon]
poll_interval = 0

[feeds]
rss_url = "https://example.com/feed"

[discord]
token = "literal-token"
"""
    with pytest.raises(ValueError, match="poll_interval"):
        Config.from_file(write_config(tmp_path, content))


def test_non_numeric_value(tmp_path) -> None:
    """Test that bad types surface as ValueError."""
    with pytest.raises(ValueError, match="Invalid config value"):
        Config.from_file(write_config(tmp_path, '[daemon]\npoll_interval = "often"\n'))


def test_missing_file(tmp_path) -> None:
    """Test the error for a missing config file, and the unvalidated fallback."""
    with pytest.raises(FileNotFoundError):
        Config.from_file(tmp_path / "missing.toml")

    config = Config.from_file(tmp_path / "missing.toml", validate=False)
    assert config.poll_interval == 10


def test_unparseable_file(tmp_path) -> None:
    """Test that broken TOML is reported."""
    with pytest.raises(ValueError, match="Failed to parse"):
        Config.from_file(write_config(tmp_path, "[daemon\n"))


def test_styles_per_source_type(tmp_path) -> None:
    """Test notification styles built from config footers."""
    content = """
[notifications]
rss_footer = "Fresh deals"
youtube_footer = "New upload"
"""
    config = Config.from_file(write_config(tmp_path, content), validate=False)
    styles = config.styles()

    assert styles["rss"].color == 0x00FF00
    assert styles["rss"].footer == "Fresh deals"
    assert styles["youtube"].color == 0xFF0000
    assert styles["youtube"].footer == "New upload"


def test_data_dir_override(tmp_path) -> None:
    """Test that data_dir moves watermarks and the registry."""
    content = f'[daemon]\ndata_dir = "{tmp_path / "custom"}"\n'
    config = Config.from_file(write_config(tmp_path, content), validate=False)

    assert config.watermark_dir == tmp_path / "custom" / "state"
    assert config.registry_path == tmp_path / "custom" / "channels.json"


def test_ensure_config_creates_files(isolated_xdg) -> None:
    """Test default config and .env creation, and that reruns keep them."""
    ensure_config()
    config_file = isolated_xdg / "xdg_config_home" / "feedbell" / "config.toml"
    env_file = config_file.parent / ".env"

    assert config_file.read_text() == DEFAULT_CONFIG_TOML
    assert env_file.exists()

    config_file.write_text("# edited\n")
    ensure_config()
    assert config_file.read_text() == "# edited\n"
