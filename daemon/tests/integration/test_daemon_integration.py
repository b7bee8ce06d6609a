"""Integration tests for a full poll-and-deliver cycle with mocked HTTP."""

import json

import httpx
from rich.console import Console

from feedbell_daemon.broadcaster import Broadcaster
from feedbell_daemon.fetchers import RSSFetcher, YouTubeFetcher
from feedbell_daemon.notifier import DiscordNotifier
from feedbell_daemon.orchestrator import DaemonOrchestrator
from feedbell_daemon.watermark import WatermarkStore
from fixtures.feed_samples import FeedServer, rss_feed, youtube_feed

RSS_URL = "https://news.example.com/feed.xml"


class MockDiscord:
    """Records posted embeds per channel, failing for chosen channels."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.posts = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        channel_id = request.url.path.split("/")[-2]
        if channel_id in self.failing:
            return httpx.Response(404, json={"message": "Unknown Channel"})
        self.posts.append((channel_id, json.loads(request.content)["embeds"][0]))
        return httpx.Response(200, json={"id": "msg"})

    def notifier(self) -> DiscordNotifier:
        return DiscordNotifier("token", client=httpx.Client(transport=httpx.MockTransport(self.handler)))


def build(state_dir, registry, styles, news: FeedServer, videos: FeedServer, discord: MockDiscord):
    store = WatermarkStore(state_dir)
    fetchers = [
        RSSFetcher(RSS_URL, store, client=news.client()),
        YouTubeFetcher("UC123", store, client=videos.client()),
    ]
    return DaemonOrchestrator(
        fetchers=fetchers,
        broadcaster=Broadcaster(discord.notifier(), styles),
        registry=registry,
        console=Console(quiet=True),
    )


def test_cycle_delivers_once_and_survives_restart(state_dir, registry, styles) -> None:
    """
    INVARIANT: Each item is posted once per channel, even across a restart
    BREAKS: Duplicate notifications flooding subscribed channels
    """
    registry.register("guild-1", "chan-1")
    news = FeedServer(rss_feed([{"guid": "B", "title": "B"}, {"guid": "A", "title": "A"}]))
    videos = FeedServer(youtube_feed([{"video_id": "v1", "title": "Video 1"}]))
    discord = MockDiscord()

    build(state_dir, registry, styles, news, videos, discord).run_once()
    assert [embed["title"] for _, embed in discord.posts] == ["B", "A", "Video 1"]

    # New article arrives; a freshly built daemon reads watermarks from disk
    news.body = rss_feed(
        [{"guid": "C", "title": "C"}, {"guid": "B", "title": "B"}, {"guid": "A", "title": "A"}]
    )
    discord.posts.clear()
    stats = build(state_dir, registry, styles, news, videos, discord).run_once()

    assert [embed["title"] for _, embed in discord.posts] == ["C"]
    assert stats["total_new"] == 1


def test_one_channel_failing_does_not_block_others(state_dir, registry, styles) -> None:
    """
    INVARIANT: A broken channel never stops delivery to other channels
    BREAKS: One deleted channel silencing every subscribed server
    """
    registry.register("guild-1", "chan-1")
    registry.register("guild-2", "chan-2")
    registry.register("guild-3", "chan-3")
    news = FeedServer(rss_feed([{"guid": "A", "title": "A"}]))
    videos = FeedServer(youtube_feed([]))
    discord = MockDiscord(failing={"chan-2"})

    stats = build(state_dir, registry, styles, news, videos, discord).run_once()

    assert sorted(channel for channel, _ in discord.posts) == ["chan-1", "chan-3"]
    assert stats["total_attempted"] == 3
    assert stats["total_failed"] == 1


def test_feed_outage_does_not_block_other_feed(state_dir, registry, styles) -> None:
    """
    INVARIANT: One feed failing leaves its watermark alone and the other feed still delivers
    BREAKS: A flaky news site hiding new videos, or losing news after recovery
    """
    registry.register("guild-1", "chan-1")
    news = FeedServer(rss_feed([{"guid": "A", "title": "A"}]))
    news.error = httpx.ConnectTimeout("timed out")
    videos = FeedServer(youtube_feed([{"video_id": "v1", "title": "Video 1"}]))
    discord = MockDiscord()

    build(state_dir, registry, styles, news, videos, discord).run_once()
    assert [embed["title"] for _, embed in discord.posts] == ["Video 1"]

    news.error = None
    discord.posts.clear()
    build(state_dir, registry, styles, news, videos, discord).run_once()
    assert [embed["title"] for _, embed in discord.posts] == ["A"]
