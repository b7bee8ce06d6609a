"""Discord message transport for notifications."""

import logging
from typing import Optional

import httpx

from .models import Notification

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"


class DeliveryError(Exception):
    """Raised when a notification could not be sent to a channel."""

    def __init__(self, target_id: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"Delivery to channel {target_id} failed: {message}")
        self.target_id = target_id
        self.status_code = status_code


class DiscordNotifier:
    """Posts notifications as embeds to Discord channels via the REST API."""

    def __init__(
        self,
        token: str,
        client: Optional[httpx.Client] = None,
        api_base: str = DISCORD_API_BASE,
        timeout: int = 30,
    ):
        """Initialize the notifier.

        Args:
            token: Discord bot token
            client: Optional HTTP client (tests pass one with a mock transport)
            api_base: Discord API base URL
            timeout: Timeout in seconds for HTTP requests
        """
        self.api_base = api_base.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)
        self.client.headers["Authorization"] = f"Bot {token}"

    def send(self, target_id: str, notification: Notification) -> None:
        """Send one notification to one channel.

        Args:
            target_id: Discord channel id
            notification: Notification to render as an embed

        Raises:
            DeliveryError: If the request fails or Discord rejects it
        """
        url = f"{self.api_base}/channels/{target_id}/messages"
        try:
            response = self.client.post(url, json={"embeds": [notification.to_embed()]})
        except httpx.HTTPError as e:
            raise DeliveryError(target_id, str(e)) from e

        if response.status_code >= 400:
            raise DeliveryError(
                target_id,
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.debug(f"Sent '{notification.title}' to channel {target_id}")

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
