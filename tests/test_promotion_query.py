import math
from datetime import datetime, timezone

import pytest

from app.promohub.db.models import ProductRef
from app.promohub.repos.promotions import PromotionStore
from app.promohub.services.promotion_query import PromotionQuery, intersects, query_promotions
from tests.promotion_helpers import promotion_input, seed_seasons


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def test_pagination_scenario(store):
    seed_seasons(store)

    result = query_promotions(store.list(), PromotionQuery(page=1, limit=2))

    assert result.total == 3
    assert len(result.items) == 2
    assert result.pages == 2
    assert result.page == 1


def test_search_matches_name_case_insensitively(store):
    seed_seasons(store)

    result = query_promotions(store.list(), PromotionQuery(search="verano"))

    assert result.total == 1
    assert all("Verano" in promotion.name for promotion in result.items)


def test_search_matches_id(store):
    promotions = seed_seasons(store)
    target = promotions["invierno"]

    result = query_promotions(store.list(), PromotionQuery(search=target.id[:8].upper()))

    assert target in result.items


def test_date_intersection_scenario(store):
    seed_seasons(store)

    result = query_promotions(
        store.list(),
        PromotionQuery(date_from=_utc("2025-06-15"), date_to=_utc("2025-06-20")),
    )

    assert [promotion.name for promotion in result.items] == ["Promo Activa Verano"]


def test_inactive_filter_scenario(store):
    promotions = seed_seasons(store)
    store.toggle_active(promotions["invierno"].id, False)

    inactive = query_promotions(store.list(), PromotionQuery(status="inactive"))
    active = query_promotions(store.list(), PromotionQuery(status="active"))

    assert inactive.total == 1
    assert "Invierno" in inactive.items[0].name
    assert active.total == 2


def test_category_filter_matches_any_product_exactly(store):
    promotions = seed_seasons(store)
    store.set_applicable_products(
        promotions["verano"].id,
        [ProductRef(id="p1", category="Bebidas"), ProductRef(id="p2")],
    )
    store.set_applicable_products(promotions["invierno"].id, [ProductRef(id="p3", category="Bebidas frias")])

    result = query_promotions(store.list(), PromotionQuery(category="  BEBIDAS "))

    assert [promotion.id for promotion in result.items] == [promotions["verano"].id]


@pytest.mark.parametrize("requested", [0, -3, 2, 99])
def test_page_is_clamped_into_range(store, requested):
    seed_seasons(store)

    result = query_promotions(store.list(), PromotionQuery(page=requested, limit=2))

    assert 1 <= result.page <= result.pages
    assert result.page == (1 if requested < 1 else 2)
    assert result.items


def test_empty_store_reports_one_page():
    result = query_promotions([], PromotionQuery(page=5))

    assert result.total == 0
    assert result.pages == 1
    assert result.page == 1
    assert result.items == []


@pytest.mark.parametrize(("total", "limit"), [(0, 1), (1, 1), (5, 2), (10, 5), (11, 5), (7, 20)])
def test_pages_formula(total, limit):
    snapshot = []
    store = PromotionStore()
    for index in range(total):
        snapshot.append(store.create(promotion_input(name=f"Promo {index:02d}")))

    result = query_promotions(snapshot, PromotionQuery(limit=limit))

    assert result.pages == max(1, math.ceil(total / limit))


def test_results_follow_name_order_regardless_of_snapshot_order(store):
    seed_seasons(store)

    result = query_promotions(reversed(store.snapshot()), PromotionQuery())

    assert [promotion.name for promotion in result.items] == [
        "Promo Activa Verano",
        "Promo Inactiva Invierno",
        "Promo Pasada Primavera",
    ]


def test_additional_filters_never_increase_total(store):
    promotions = seed_seasons(store)
    store.toggle_active(promotions["primavera"].id, False)
    base = PromotionQuery(search="promo")
    narrowed = [
        PromotionQuery(search="promo", status="active"),
        PromotionQuery(search="promo", category="none"),
        PromotionQuery(search="promo", date_from=_utc("2025-07-01")),
        PromotionQuery(search="promo", date_to=_utc("2025-03-15")),
    ]

    base_total = query_promotions(store.list(), base).total

    for query in narrowed:
        assert query_promotions(store.list(), query).total <= base_total


def test_query_does_not_mutate_store(store):
    seed_seasons(store)
    before = [(promotion.id, promotion.is_active) for promotion in store.snapshot()]

    query_promotions(store.list(), PromotionQuery(status="inactive", search="x", page=9))

    assert [(promotion.id, promotion.is_active) for promotion in store.snapshot()] == before


@pytest.mark.parametrize(
    ("date_from", "date_to", "expected"),
    [
        (None, None, True),
        ("2025-06-10", None, True),
        ("2025-06-11", None, False),
        (None, "2025-06-01", True),
        (None, "2025-05-31", False),
        ("2025-06-05", "2025-06-06", True),
        ("2025-05-01", "2025-05-31", False),
        ("2025-06-11", "2025-07-01", False),
    ],
)
def test_intersects_bounds(date_from, date_to, expected):
    start, end = _utc("2025-06-01"), _utc("2025-06-10")

    assert intersects(start, end, date_from and _utc(date_from), date_to and _utc(date_to)) is expected


@pytest.mark.parametrize(
    ("first", "second"),
    [
        (("2025-01-01", "2025-01-10"), ("2025-01-05", "2025-01-20")),
        (("2025-01-01", "2025-01-10"), ("2025-01-10", "2025-01-20")),
        (("2025-01-01", "2025-01-10"), ("2025-01-11", "2025-01-20")),
        (("2025-01-01", "2025-03-01"), ("2025-02-01", "2025-02-02")),
    ],
)
def test_intersects_is_symmetric(first, second):
    a_start, a_end = (_utc(value) for value in first)
    b_start, b_end = (_utc(value) for value in second)

    assert intersects(a_start, a_end, b_start, b_end) == intersects(b_start, b_end, a_start, a_end)


def test_from_request_clamps_limit_and_page():
    query = PromotionQuery.from_request(page=-4, limit=1000, max_limit=100, search="  x ", category=None)

    assert query.page == 1
    assert query.limit == 100
    assert query.search == "x"
    assert query.category == ""
    assert PromotionQuery.from_request(page=1, limit=0, max_limit=100).limit == 1


def test_naive_bounds_are_read_as_utc(store):
    seed_seasons(store)

    result = query_promotions(
        store.list(),
        PromotionQuery(date_from=datetime(2025, 6, 15), date_to=datetime(2025, 6, 20)),
    )

    assert [promotion.name for promotion in result.items] == ["Promo Activa Verano"]
