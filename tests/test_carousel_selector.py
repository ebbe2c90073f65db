from app.promohub.services.carousel import CarouselSelector, dedupe
from tests.promotion_helpers import promotion_input


def _seed(store, *names):
    return [store.create(promotion_input(name=name)).id for name in names]


def test_set_carousel_dedupes_then_drops_unknown_ids(store):
    a, b, c = _seed(store, "Promo A", "Promo B", "Promo C")
    selector = CarouselSelector(store)

    selection = selector.set_carousel([a, b, b, c, "nonexistent"])

    assert selection.ids == [a, b, c]
    assert [promotion.id for promotion in selection.items] == [a, b, c]
    assert selector.get_carousel_ids() == [a, b, c]


def test_set_carousel_preserves_requested_order(store):
    a, b, c = _seed(store, "Promo A", "Promo B", "Promo C")
    selector = CarouselSelector(store)

    assert selector.set_carousel([c, a, b]).ids == [c, a, b]


def test_set_carousel_replaces_previous_selection(store):
    a, b = _seed(store, "Promo A", "Promo B")
    selector = CarouselSelector(store)
    selector.set_carousel([a, b])

    selector.set_carousel([b])

    assert selector.get_carousel_ids() == [b]
    assert selector.set_carousel([]).ids == []


def test_normalize_reports_duplicates_and_missing(store):
    a, b = _seed(store, "Promo A", "Promo B")
    selector = CarouselSelector(store)

    check = selector.normalize([a, a, "ghost", b, "ghost"])

    assert check.ids == [a, b]
    assert check.duplicates == [a, "ghost"]
    assert check.missing == ["ghost"]
    assert check.valid is False
    assert selector.normalize([a, b]).valid is True


def test_normalize_is_idempotent(store):
    a, b = _seed(store, "Promo A", "Promo B")
    selector = CarouselSelector(store)

    once = selector.normalize([b, "x", a, b]).ids

    assert selector.normalize(once).ids == once


def test_get_carousel_ids_returns_copy(store):
    (a,) = _seed(store, "Promo A")
    selector = CarouselSelector(store)
    selector.set_carousel([a])

    ids = selector.get_carousel_ids()
    ids.append("tampered")

    assert selector.get_carousel_ids() == [a]


def test_stale_ids_are_skipped_on_read(store):
    a, b = _seed(store, "Promo A", "Promo B")
    selector = CarouselSelector(store)
    selector.set_carousel([a, b])

    store.delete(a)

    assert [promotion.id for promotion in selector.get_carousel_promotions()] == [b]
    assert selector.get_carousel_ids() == [a, b]


def test_dedupe_keeps_first_occurrence():
    unique, duplicates = dedupe(["x", "y", "x", "z", "y", "x"])

    assert unique == ["x", "y", "z"]
    assert duplicates == ["x", "y"]
