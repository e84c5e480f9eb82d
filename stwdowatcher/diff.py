"""Diff utilities for comparing extracted offers against the seen set."""

from __future__ import annotations

from typing import Container, Iterable, List

from .models import Offer


def diff_offers(offers: Iterable[Offer], seen: Container[str]) -> List[Offer]:
    """Return offers whose id is not in ``seen``, keeping extraction order."""
    return [offer for offer in offers if offer.id not in seen]
