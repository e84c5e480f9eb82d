"""Core execution workflow: fetch, extract, diff, notify, persist."""

from __future__ import annotations

import datetime as dt
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .config import Settings
from .diff import diff_offers
from .extractor import DEFAULT_STRATEGIES, ExtractionStrategy, extract_offers
from .fetcher import PageFetcher
from .models import CycleSummary, FetchFailed, NotModified
from .notifications import Notifier, build_notifier, deliver, format_offer_message
from .store import JsonStateStore, SeenStateCorrupted

logger = logging.getLogger(__name__)


@dataclass
class OfferWatcherRunner:
    """Coordinates fetch, extraction, diff, notification and persistence."""

    settings: Settings
    fetcher: PageFetcher
    store: JsonStateStore
    notifier: Notifier
    strategies: Sequence[ExtractionStrategy] = field(
        default_factory=lambda: DEFAULT_STRATEGIES)
    clock: Callable[[], dt.datetime] = dt.datetime.now

    @classmethod
    def from_settings(cls, settings: Settings) -> "OfferWatcherRunner":
        return cls(
            settings=settings,
            fetcher=PageFetcher(settings),
            store=JsonStateStore.from_settings(settings),
            notifier=build_notifier(settings),
        )

    def run(self, dry_run: bool = False) -> CycleSummary:
        """Execute a single monitoring cycle."""
        executed_at = self.clock().isoformat(timespec="seconds")
        logger.debug("Starting monitor cycle for %s", self.settings.monitor_url)

        meta = self.store.load_meta()
        outcome = self.fetcher.fetch(meta)
        if isinstance(outcome, NotModified):
            logger.info("Not modified (304). No changes.")
            return CycleSummary(executed_at=executed_at, status="not_modified")
        if isinstance(outcome, FetchFailed):
            logger.error("Fetch failed for %s: %s", self.settings.monitor_url,
                         outcome.reason)
            return CycleSummary(executed_at=executed_at, status="fetch_failed")

        offers = extract_offers(outcome.html, self.settings.monitor_url,
                                self.strategies)

        try:
            seen = self.store.load_seen()
        except SeenStateCorrupted as exc:
            logger.error("%s; skipping this check to avoid re-notifying", exc)
            return CycleSummary(executed_at=executed_at,
                                status="aborted",
                                offers=offers)

        new_offers = diff_offers(offers, seen)

        if dry_run:
            logger.info(
                "Dry run: %d offers on page, %d would be reported as new",
                len(offers),
                len(new_offers),
            )
            return CycleSummary(executed_at=executed_at,
                                status="dry_run",
                                offers=offers,
                                new_offers=new_offers)

        notification = None
        if new_offers:
            logger.info("Detected %d new offers: %s", len(new_offers),
                        [offer.title for offer in new_offers])
            message = format_offer_message(new_offers, now=self.clock)
            notification = deliver(self.notifier, message)
            if not notification.delivered:
                logger.warning("Notification via %s not delivered: %s",
                               notification.channel, notification.reason)
            self.store.save_seen(seen.merge(offer.id for offer in new_offers))
            status = "new_offers"
        else:
            logger.info("No new offers (count: %d)", len(offers))
            status = "no_new_offers"

        self.store.save_meta(outcome.meta)
        return CycleSummary(
            executed_at=executed_at,
            status=status,
            offers=offers,
            new_offers=new_offers,
            notification=notification,
        )


def run_forever(
    runner: OfferWatcherRunner,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
    max_cycles: Optional[int] = None,
) -> None:
    """Invoke ``runner.run`` every ``interval`` seconds.

    A failing cycle is logged and the next tick still runs. ``max_cycles``
    bounds the loop for tests; ``None`` polls indefinitely.
    """
    cycles = 0
    while max_cycles is None or cycles < max_cycles:
        try:
            runner.run()
        except Exception:  # noqa: BLE001
            logger.exception("Monitor cycle failed")
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break
        sleep(interval)
