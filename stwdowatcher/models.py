"""Core data models for the STWDO offer watcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Union


@dataclass(frozen=True)
class Offer:
    """Represents a housing offer extracted from the listing page."""

    id: str
    title: str
    url: str


@dataclass(frozen=True)
class RetrievalMeta:
    """Cache validators replayed as conditional request headers."""

    etag: Optional[str] = None
    last_modified: Optional[str] = None

    def to_dict(self) -> dict:
        payload = {}
        if self.etag:
            payload["etag"] = self.etag
        if self.last_modified:
            payload["lastModified"] = self.last_modified
        return payload


class SeenSet:
    """Ordered collection of offer ids that have already been reported.

    Only ever grows: ``merge`` returns a new set containing the previous ids
    followed by any ids not present yet.
    """

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(ids)

    def __contains__(self, offer_id: object) -> bool:
        return offer_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SeenSet):
            return NotImplemented
        return list(self._ids) == list(other._ids)

    def __repr__(self) -> str:
        return f"SeenSet({list(self._ids)!r})"

    def merge(self, ids: Iterable[str]) -> "SeenSet":
        return SeenSet([*self._ids, *ids])

    def to_list(self) -> List[str]:
        return list(self._ids)


@dataclass(frozen=True)
class NotModified:
    """The server reported the page unchanged since the cached validators."""


@dataclass(frozen=True)
class PageContent:
    """A successful retrieval carrying the page body and refreshed validators."""

    html: str
    meta: RetrievalMeta


@dataclass(frozen=True)
class FetchFailed:
    """Network failure, timeout, or an unexpected status code."""

    reason: str


FetchOutcome = Union[NotModified, PageContent, FetchFailed]


@dataclass(frozen=True)
class NotifyResult:
    """Outcome of dispatching one message through a notification channel."""

    channel: str
    delivered: bool
    reason: Optional[str] = None


@dataclass
class CycleSummary:
    """Aggregated result returned by a monitoring cycle."""

    executed_at: str
    status: str
    offers: Sequence[Offer] = field(default_factory=list)
    new_offers: Sequence[Offer] = field(default_factory=list)
    notification: Optional[NotifyResult] = None
