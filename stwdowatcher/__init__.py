"""STWDO offer watcher package initialization."""

from .config import Settings
from .diff import diff_offers
from .extractor import AnchorHeuristicStrategy, TeaserListStrategy, extract_offers
from .fetcher import PageFetcher
from .models import (
    CycleSummary,
    FetchFailed,
    NotModified,
    NotifyResult,
    Offer,
    PageContent,
    RetrievalMeta,
    SeenSet,
)
from .notifications import build_notifier, deliver, format_offer_message
from .runner import OfferWatcherRunner, run_forever
from .store import JsonStateStore, SeenStateCorrupted

__all__ = [
    "AnchorHeuristicStrategy",
    "CycleSummary",
    "FetchFailed",
    "JsonStateStore",
    "NotModified",
    "NotifyResult",
    "Offer",
    "OfferWatcherRunner",
    "PageContent",
    "PageFetcher",
    "RetrievalMeta",
    "SeenSet",
    "SeenStateCorrupted",
    "Settings",
    "TeaserListStrategy",
    "build_notifier",
    "deliver",
    "diff_offers",
    "extract_offers",
    "format_offer_message",
    "run_forever",
]
