"""Daemon orchestration logic, separated from entry point for testability."""

import logging
import time
from typing import Any, Dict, List, Optional

from rich.console import Console

from .broadcaster import Broadcaster
from .fetchers.base import FeedFetcher
from .observability import log as obs_log
from .registry import DestinationRegistry

logger = logging.getLogger(__name__)


class DaemonOrchestrator:
    """Runs one poll-and-deliver cycle over all configured feeds."""

    def __init__(
        self,
        fetchers: List[FeedFetcher],
        broadcaster: Broadcaster,
        registry: DestinationRegistry,
        console: Optional[Console] = None,
    ):
        """Initialize orchestrator with dependencies.

        Args:
            fetchers: One fetcher per configured feed, polled in order
            broadcaster: Broadcaster for new items
            registry: Destination registry read once per feed with new items
            console: Optional Rich console for output
        """
        self.fetchers = fetchers
        self.broadcaster = broadcaster
        self.registry = registry
        self.console = console or Console()

    def poll_fetcher(self, fetcher: FeedFetcher) -> Dict[str, Any]:
        """Poll one feed and broadcast whatever is new.

        Returns:
            Dict with stats: new_items, attempted, delivered, failed, errors
        """
        stats = {"new_items": 0, "attempted": 0, "delivered": 0, "failed": 0, "errors": []}

        try:
            items = fetcher.poll_for_new()
        except Exception as e:
            error_msg = f"Failed to poll {fetcher.source_key}: {e}"
            logger.exception(error_msg)
            self.console.print(f"  [red]{error_msg}[/red]")
            stats["errors"].append(error_msg)
            return stats

        stats["new_items"] = len(items)
        if not items:
            self.console.print(f"  📭 Nothing new from {fetcher.source_key}")
            return stats

        self.console.print(f"  📰 {len(items)} new item(s) from {fetcher.source_key}")

        destinations = self.registry.snapshot()
        if not destinations:
            self.console.print("  [yellow]No subscribed channels, nothing to deliver[/yellow]")
            return stats

        try:
            report = self.broadcaster.deliver(items, destinations)
        except Exception as e:
            error_msg = f"Broadcast of {fetcher.source_key} items failed: {e}"
            logger.exception(error_msg)
            self.console.print(f"  [red]{error_msg}[/red]")
            stats["errors"].append(error_msg)
            return stats

        stats["attempted"] = report.attempted
        stats["delivered"] = report.delivered
        stats["failed"] = len(report.failed)
        for result in report.failed:
            stats["errors"].append(
                f"Delivery to {result.source_id}/{result.target_id} failed: {result.error}"
            )

        self.console.print(
            f"  📨 Delivered {report.delivered}/{report.attempted} notification(s)"
        )
        return stats

    def run_once(self) -> dict:
        """Run one cycle over every fetcher.

        Returns:
            Dict with stats: total_new, total_attempted, total_delivered, total_failed, errors
        """
        start_time = time.time()
        stats = {
            "total_new": 0,
            "total_attempted": 0,
            "total_delivered": 0,
            "total_failed": 0,
            "errors": [],
        }

        if not self.fetchers:
            self.console.print("[yellow]No feeds configured.[/yellow]")
            return stats

        for fetcher in self.fetchers:
            self.console.print(f"[bold cyan]Checking {fetcher.source_type} feed[/bold cyan]")
            fetcher_stats = self.poll_fetcher(fetcher)

            stats["total_new"] += fetcher_stats["new_items"]
            stats["total_attempted"] += fetcher_stats["attempted"]
            stats["total_delivered"] += fetcher_stats["delivered"]
            stats["total_failed"] += fetcher_stats["failed"]
            stats["errors"].extend(fetcher_stats["errors"])

        obs_log(
            "daemon.cycle.complete",
            feeds=len(self.fetchers),
            new_items=stats["total_new"],
            delivered=stats["total_delivered"],
            failed=stats["total_failed"],
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return stats
