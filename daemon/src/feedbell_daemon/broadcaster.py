"""Fan-out of new items to every subscribed destination."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Mapping, Protocol, Sequence

from .models import DeliveryReport, DeliveryResult, Item, Notification, NotificationStyle
from .observability import log as obs_log

logger = logging.getLogger(__name__)


class Sender(Protocol):
    def send(self, target_id: str, notification: Notification) -> None: ...


class Broadcaster:
    """Delivers each item to each destination, isolating failures.

    Items go out in the order given. For a single item all destinations are
    sent to from a bounded worker pool and every send's outcome is captured
    on its own, so one failing channel never blocks the others.
    """

    def __init__(
        self,
        sender: Sender,
        styles: Dict[str, NotificationStyle],
        max_workers: int = 4,
    ):
        """Initialize the broadcaster.

        Args:
            sender: Transport with a ``send(target_id, notification)`` method
            styles: Notification style per source type ('rss', 'youtube')
            max_workers: Maximum concurrent sends per item
        """
        self.sender = sender
        self.styles = styles
        self.max_workers = max_workers

    def deliver(self, items: Sequence[Item], destinations: Mapping[str, str]) -> DeliveryReport:
        """Send one notification per item per destination.

        Args:
            items: New items in the order they should be posted
            destinations: Snapshot of server id -> channel id

        Returns:
            DeliveryReport with one result per attempted send
        """
        report = DeliveryReport()
        if not items or not destinations:
            return report

        targets = list(destinations.items())
        workers = max(1, min(self.max_workers, len(targets)))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="deliver") as pool:
            for item in items:
                notification = Notification.from_item(item, self.styles[item.source_type])
                futures = [
                    pool.submit(self._send_one, source_id, target_id, item, notification)
                    for source_id, target_id in targets
                ]
                report.results.extend(future.result() for future in futures)

        obs_log(
            "broadcast.complete",
            items=len(items),
            destinations=len(targets),
            attempted=report.attempted,
            delivered=report.delivered,
            failed=len(report.failed),
        )
        return report

    def _send_one(
        self,
        source_id: str,
        target_id: str,
        item: Item,
        notification: Notification,
    ) -> DeliveryResult:
        try:
            self.sender.send(target_id, notification)
        except Exception as e:
            logger.error(f"Failed to send to server {source_id} (channel {target_id}): {e}")
            obs_log(
                "delivery.error",
                source_id=source_id,
                target_id=target_id,
                identifier=item.identifier,
                error=str(e),
            )
            return DeliveryResult(
                source_id=source_id,
                target_id=target_id,
                identifier=item.identifier,
                success=False,
                error=str(e),
            )

        return DeliveryResult(
            source_id=source_id,
            target_id=target_id,
            identifier=item.identifier,
            success=True,
        )
