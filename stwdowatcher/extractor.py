"""HTML extraction of housing offers from the STWDO listing page.

Extraction runs an ordered list of strategies and keeps the first non-empty
result. The structural strategy reads the teaser cards of the residential
offer list; the heuristic strategy scans anchors when the page layout has
drifted and the cards can no longer be found.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import Offer

logger = logging.getLogger(__name__)

TEASER_SELECTOR = "#residential-offer-list .teaser[data-href]"
LOCATION_SELECTOR = ".subheader-5"
HEADLINE_SELECTOR = ".headline-5"
FALLBACK_CONTAINERS = ("main", "#content", ".container", ".content")
OFFER_KEYWORDS = re.compile(r"wohn|zimmer|apartment|angebot|bewerb",
                            re.IGNORECASE)


class ExtractionStrategy(Protocol):
    """Protocol shared by all extraction strategies."""

    name: str

    def extract(self, markup: str, base_url: str) -> List[Offer]:
        ...


def resolve_link(href: Optional[str], base_url: str) -> Optional[str]:
    """Resolve ``href`` against ``base_url``; None when it is not an http(s) link."""
    href = (href or "").strip()
    if not href:
        return None
    absolute = urljoin(base_url, href)
    if urlparse(absolute).scheme not in ("http", "https"):
        return None
    return absolute


def _clean_text(node: Tag | None) -> str:
    if node is None:
        return ""
    return " ".join(node.get_text(" ").split())


def _select_text(element: Tag, selector: str) -> str:
    return " ".join(
        text for text in (_clean_text(node) for node in element.select(selector))
        if text)


def _dedupe(candidates: Iterable[Tuple[str, str]]) -> List[Offer]:
    offers: Dict[str, Offer] = {}
    for offer_id, title in candidates:
        if offer_id in offers:
            continue
        offers[offer_id] = Offer(id=offer_id, title=title or offer_id, url=offer_id)
    return list(offers.values())


class TeaserListStrategy:
    """Read ``.teaser[data-href]`` cards inside ``#residential-offer-list``."""

    name = "teaser-list"

    def extract(self, markup: str, base_url: str) -> List[Offer]:
        soup = BeautifulSoup(markup or "", "html.parser")
        return _dedupe(self._candidates(soup, base_url))

    def _candidates(self, soup: BeautifulSoup, base_url: str):
        for teaser in soup.select(TEASER_SELECTOR):
            absolute = resolve_link(teaser.get("data-href"), base_url)
            if not absolute:
                logger.debug("Skipping teaser without resolvable data-href")
                continue
            location = _select_text(teaser, LOCATION_SELECTOR)
            headline = _select_text(teaser, HEADLINE_SELECTOR)
            title = f"{location}: {headline}" if location else headline
            yield absolute, title


class AnchorHeuristicStrategy:
    """Fallback: internal anchors whose text or href mention housing terms."""

    name = "anchor-heuristic"

    def __init__(self,
                 containers: Sequence[str] = FALLBACK_CONTAINERS,
                 keywords: re.Pattern = OFFER_KEYWORDS):
        self.containers = tuple(containers)
        self.keywords = keywords

    def extract(self, markup: str, base_url: str) -> List[Offer]:
        soup = BeautifulSoup(markup or "", "html.parser")
        domain = _source_domain(base_url)
        return _dedupe(
            self._candidates(self._find_anchors(soup), base_url, domain))

    def _find_anchors(self, soup: BeautifulSoup) -> List[Tag]:
        for selector in self.containers:
            anchors = [
                anchor for container in soup.select(selector)
                for anchor in container.select("a[href]")
            ]
            if anchors:
                logger.debug("Using %d anchors found inside %r", len(anchors),
                             selector)
                return anchors
        return soup.select("a[href]")

    def _candidates(self, anchors: Iterable[Tag], base_url: str, domain: str):
        for anchor in anchors:
            href = (anchor.get("href") or "").strip()
            if not href:
                continue
            text = _clean_text(anchor)
            internal = href.startswith("/") or (bool(domain) and domain in href)
            if not internal or not self.keywords.search(text + href):
                continue
            absolute = resolve_link(href, base_url)
            if absolute:
                yield absolute, text


def _source_domain(base_url: str) -> str:
    host = (urlparse(base_url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


DEFAULT_STRATEGIES: Tuple[ExtractionStrategy, ...] = (
    TeaserListStrategy(),
    AnchorHeuristicStrategy(),
)


def extract_offers(
    markup: str,
    base_url: str,
    strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
) -> List[Offer]:
    """Return offers from the first strategy producing a non-empty result."""
    for strategy in strategies:
        offers = strategy.extract(markup, base_url)
        if offers:
            logger.debug("Strategy %s extracted %d offers", strategy.name,
                         len(offers))
            return offers
        logger.debug("Strategy %s found no offers", strategy.name)
    return []


__all__ = [
    "AnchorHeuristicStrategy",
    "DEFAULT_STRATEGIES",
    "ExtractionStrategy",
    "TeaserListStrategy",
    "extract_offers",
    "resolve_link",
]
