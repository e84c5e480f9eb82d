from stwdowatcher.diff import diff_offers
from stwdowatcher.models import Offer, SeenSet


def make_offer(suffix: str) -> Offer:
    url = f"https://www.stwdo.de/wohnen/angebot/{suffix}"
    return Offer(id=url, title=f"Offer {suffix}", url=url)


def test_diff_returns_unseen_offers_in_extraction_order():
    offers = [make_offer("3"), make_offer("1"), make_offer("2")]
    seen = SeenSet([make_offer("1").id])

    assert diff_offers(offers, seen) == [make_offer("3"), make_offer("2")]


def test_diff_against_empty_set_returns_everything():
    offers = [make_offer("1"), make_offer("2")]
    assert diff_offers(offers, SeenSet()) == offers


def test_diff_with_everything_seen_is_empty():
    offers = [make_offer("1"), make_offer("2")]
    seen = SeenSet(offer.id for offer in offers)
    assert diff_offers(offers, seen) == []


def test_diff_accepts_plain_sets():
    offers = [make_offer("1"), make_offer("2")]
    assert diff_offers(offers, {make_offer("2").id}) == [make_offer("1")]


def test_seen_set_merge_is_monotonic_and_ordered():
    seen = SeenSet(["a", "b"])
    merged = seen.merge(["b", "c"])

    assert merged.to_list() == ["a", "b", "c"]
    assert seen.to_list() == ["a", "b"]
    assert set(seen) <= set(merged)
