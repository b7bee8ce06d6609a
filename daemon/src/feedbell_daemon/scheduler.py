"""Periodic feed polling with APScheduler."""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from rich.console import Console

from .orchestrator import DaemonOrchestrator

logger = logging.getLogger(__name__)

POLL_JOB_ID = "poll_feeds"


class FeedScheduler:
    """Runs the poll-and-deliver cycle at startup and then every interval.

    A single interval job is used with ``max_instances=1`` so a slow cycle
    delays the next one instead of overlapping it.
    """

    def __init__(
        self,
        orchestrator: DaemonOrchestrator,
        interval_minutes: int = 10,
        scheduler: Optional[AsyncIOScheduler] = None,
        console: Optional[Console] = None,
    ):
        self.orchestrator = orchestrator
        self.interval_minutes = interval_minutes
        self.scheduler = scheduler or AsyncIOScheduler()
        self.console = console or Console()

    def add_jobs(self) -> None:
        """Register the polling job, first firing immediately."""
        self.scheduler.add_job(
            func=self.run_cycle,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=POLL_JOB_ID,
            name="Poll feeds and deliver notifications",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(),
        )

    def start(self) -> None:
        self.add_jobs()
        self.scheduler.start()
        logger.info(f"Scheduler started, polling every {self.interval_minutes} minutes")

    def shutdown(self, wait: bool = False) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

    def run_cycle(self) -> dict:
        """Synchronous job body, run in the scheduler's thread pool."""
        self.console.print(
            f"\n[blue]⏰ Checking feeds at {datetime.now().strftime('%H:%M:%S')}[/blue]"
        )
        stats = self.orchestrator.run_once()
        if stats["total_new"] > 0:
            self.console.print(
                f"[green]Completed: {stats['total_new']} new item(s), "
                f"{stats['total_delivered']} notification(s) delivered[/green]\n"
            )
        else:
            self.console.print("[dim]No new items found[/dim]\n")
        return stats
