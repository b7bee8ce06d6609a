"""Configuration loading from TOML."""

import tomllib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import NotificationStyle

RSS_COLOR = 0x00FF00
YOUTUBE_COLOR = 0xFF0000


def config_dir() -> Path:
    """Return $XDG_CONFIG_HOME/feedbell (or ~/.config/feedbell)."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))
    return Path(xdg_config_home) / "feedbell"


def default_data_dir() -> Path:
    """Return $XDG_DATA_HOME/feedbell (or ~/.local/share/feedbell)."""
    data_home = os.environ.get("XDG_DATA_HOME", str(Path.home() / ".local" / "share"))
    return Path(data_home) / "feedbell"


def expand_env_var(value: Optional[str]) -> Optional[str]:
    """Resolve ``env:NAME`` references; unresolved references become None."""
    if value is None:
        return None
    if value.startswith("env:"):
        return os.environ.get(value[4:]) or None
    return value or None


@dataclass
class Config:
    """Configuration dataclass with validation.

    Loads from ~/.config/feedbell/config.toml. Feed sources and the Discord
    token are usually given as ``env:`` references.
    """

    # Daemon settings
    poll_interval: int  # minutes
    request_timeout: int  # seconds
    delivery_workers: int
    data_dir: Path

    # Feeds
    rss_url: Optional[str]
    youtube_channel_id: Optional[str]

    # Discord transport
    discord_token: Optional[str]

    # Notification footers
    rss_footer: str
    youtube_footer: str

    # Liveness API
    api_host: str = "127.0.0.1"
    api_port: int = 3000

    @property
    def watermark_dir(self) -> Path:
        return self.data_dir / "state"

    @property
    def registry_path(self) -> Path:
        return self.data_dir / "channels.json"

    def styles(self) -> dict:
        """Notification style per source type."""
        return {
            "rss": NotificationStyle(color=RSS_COLOR, footer=self.rss_footer),
            "youtube": NotificationStyle(color=YOUTUBE_COLOR, footer=self.youtube_footer),
        }

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration values are invalid.
        """
        if not self.discord_token:
            raise ValueError(
                "Discord token not configured. Set DISCORD_TOKEN or [discord] token in config.toml"
            )

        if not self.rss_url and not self.youtube_channel_id:
            raise ValueError(
                "No feeds configured. Set RSS_URL and/or YOUTUBE_CHANNEL_ID, or the [feeds] section"
            )

        if self.poll_interval < 1:
            raise ValueError(
                f"poll_interval must be at least 1 minute, got {self.poll_interval}"
            )

        if self.request_timeout < 1:
            raise ValueError(
                f"request_timeout must be at least 1 second, got {self.request_timeout}"
            )

        if not 1 <= self.delivery_workers <= 32:
            raise ValueError(
                f"delivery_workers must be between 1 and 32, got {self.delivery_workers}"
            )

        if not 1 <= self.api_port <= 65535:
            raise ValueError(f"api port must be between 1 and 65535, got {self.api_port}")

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None, validate: bool = True) -> "Config":
        """Load configuration from TOML file.

        Args:
            config_path: Optional path to config file.
                        Defaults to $XDG_CONFIG_HOME/feedbell/config.toml
            validate: Require a complete daemon configuration. Without it a
                missing file yields the defaults.

        Returns:
            Config instance.
        """
        if config_path is None:
            config_path = config_dir() / "config.toml"

        if not config_path.exists():
            if not validate:
                return cls.from_dict({})
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Run 'feedbell-daemon init' to create the default configuration."
            )

        try:
            with open(config_path, "rb") as f:
                config_dict = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse config file {config_path}: {e}")

        config = cls.from_dict(config_dict)
        if validate:
            config.validate()
        return config

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Build a Config from parsed TOML sections, applying defaults."""
        daemon = config_dict.get("daemon", {})
        feeds = config_dict.get("feeds", {})
        discord = config_dict.get("discord", {})
        notifications = config_dict.get("notifications", {})
        api = config_dict.get("api", {})

        data_dir = daemon.get("data_dir")

        try:
            return cls(
                poll_interval=int(daemon.get("poll_interval", 10)),
                request_timeout=int(daemon.get("request_timeout", 30)),
                delivery_workers=int(daemon.get("delivery_workers", 4)),
                data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(),
                rss_url=expand_env_var(feeds.get("rss_url", "env:RSS_URL")),
                youtube_channel_id=expand_env_var(
                    feeds.get("youtube_channel_id", "env:YOUTUBE_CHANNEL_ID")
                ),
                discord_token=expand_env_var(discord.get("token", "env:DISCORD_TOKEN")),
                rss_footer=notifications.get("rss_footer", "Fresh news from the feed"),
                youtube_footer=notifications.get("youtube_footer", "New video on YouTube"),
                api_host=api.get("host", "127.0.0.1"),
                api_port=int(api.get("port", 3000)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid config value: {e}")
