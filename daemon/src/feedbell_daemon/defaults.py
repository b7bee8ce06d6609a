"""Default configuration files for Feedbell daemon."""

from .config import config_dir


DEFAULT_CONFIG_TOML = """# Feedbell Configuration

[daemon]
poll_interval = 10  # minutes between feed checks
request_timeout = 30  # seconds per feed request
delivery_workers = 4  # concurrent sends per item
# data_dir = "~/.local/share/feedbell"  # watermarks and channels.json

[feeds]
rss_url = "env:RSS_URL"  # generic RSS/Atom feed, leave unset to disable
youtube_channel_id = "env:YOUTUBE_CHANNEL_ID"  # YouTube channel id (UC...), leave unset to disable

[discord]
token = "env:DISCORD_TOKEN"  # bot token used to post messages

[notifications]
rss_footer = "Fresh news from the feed"
youtube_footer = "New video on YouTube"

[api]
host = "127.0.0.1"  # liveness endpoint binding
port = 3000
"""

DEFAULT_ENV = """# Secrets for Feedbell, loaded at daemon startup
DISCORD_TOKEN=
RSS_URL=
YOUTUBE_CHANNEL_ID=
"""


def ensure_config() -> None:
    """Create default configuration directory and files if they don't exist.

    Creates $XDG_CONFIG_HOME/feedbell/ (or ~/.config/feedbell/) with:
    - config.toml: Daemon configuration
    - .env: Secrets template
    """
    directory = config_dir()
    directory.mkdir(parents=True, exist_ok=True)

    config_file = directory / "config.toml"
    if not config_file.exists():
        config_file.write_text(DEFAULT_CONFIG_TOML)
        print(f"Created {config_file}")
    else:
        print(f"Config already exists: {config_file}")

    env_file = directory / ".env"
    if not env_file.exists():
        env_file.write_text(DEFAULT_ENV)
        env_file.chmod(0o600)
        print(f"Created {env_file}")


if __name__ == "__main__":
    ensure_config()
