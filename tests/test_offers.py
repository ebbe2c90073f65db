from datetime import datetime, timezone

import pytest

from app.promohub.db.models import ProductRef
from app.promohub.services.offers import OfferQuery, discounted_price
from tests.promotion_helpers import promotion_input, promotion_payload

NOW = datetime(2025, 7, 1, 12, tzinfo=timezone.utc)

CATALOG = [
    ProductRef(id="cafe", name="Cafe Molido", price=100, category="Bebidas"),
    ProductRef(id="te", name="Te Verde", price=40, category="Bebidas"),
    ProductRef(id="pan", name="Pan Integral", price=20, category="Panaderia"),
]


@pytest.fixture()
def offers_service(service):
    service.upsert_catalog_products(CATALOG)
    summer = service.create_promotion(
        promotion_input(
            name="A Verano",
            discount_value=10,
            start_date="2025-06-01",
            end_date="2025-08-31",
            applicable_product_ids=["cafe", "te"],
        )
    )
    service.create_promotion(
        promotion_input(
            name="B Fijo",
            discount_type="FIXED_AMOUNT",
            discount_value=15,
            start_date="2025-06-01",
            end_date="2025-07-15",
            applicable_product_ids=["te", "pan", "sin-catalogo"],
        )
    )
    service.create_promotion(
        promotion_input(
            name="C Pasada",
            discount_value=50,
            start_date="2025-01-01",
            end_date="2025-01-31",
            applicable_product_ids=["cafe"],
        )
    )
    service.summer = summer
    return service


def test_offers_list_catalog_products_of_running_promotions(offers_service):
    page = offers_service.list_offer_products(OfferQuery(), now=NOW)

    assert page.total == 3
    by_id = {offer.product.id: offer for offer in page.items}
    assert set(by_id) == {"cafe", "te", "pan"}
    assert by_id["te"].promotion.name == "A Verano"
    assert by_id["te"].effective_offer_price == pytest.approx(36)
    assert by_id["pan"].effective_offer_price == 5
    assert by_id["pan"].discount_percent == 75


def test_inactive_promotions_are_skipped(offers_service):
    offers_service.toggle_promotion_status(offers_service.summer.id, False)

    page = offers_service.list_offer_products(OfferQuery(), now=NOW)

    assert {offer.product.id for offer in page.items} == {"te", "pan"}
    assert all(offer.promotion.name == "B Fijo" for offer in page.items)


def test_offers_default_to_best_savings(offers_service):
    page = offers_service.list_offer_products(OfferQuery(), now=NOW)

    assert [offer.product.id for offer in page.items] == ["pan", "cafe", "te"]


@pytest.mark.parametrize(
    ("sort", "expected"),
    [
        ("highest_discount", ["pan", "cafe", "te"]),
        ("price_low_high", ["pan", "te", "cafe"]),
        ("price_high_low", ["cafe", "te", "pan"]),
        ("ending_soon", ["pan", "cafe", "te"]),
    ],
)
def test_offer_sorting(offers_service, sort, expected):
    page = offers_service.list_offer_products(OfferQuery(sort=sort), now=NOW)

    assert [offer.product.id for offer in page.items] == expected


def test_offer_filters_and_paging(offers_service):
    bebidas = offers_service.list_offer_products(OfferQuery(category="bebidas"), now=NOW)
    assert {offer.product.id for offer in bebidas.items} == {"cafe", "te"}

    searched = offers_service.list_offer_products(OfferQuery(search="verde"), now=NOW)
    assert [offer.product.id for offer in searched.items] == ["te"]

    paged = offers_service.list_offer_products(OfferQuery(limit=2, offset=2), now=NOW)
    assert paged.total == 3
    assert paged.pages == 2
    assert [offer.product.id for offer in paged.items] == ["te"]


def test_no_running_promotions_yields_empty_page(offers_service):
    page = offers_service.list_offer_products(OfferQuery(), now=datetime(2030, 1, 1, tzinfo=timezone.utc))

    assert page.items == []
    assert page.total == 0
    assert page.pages == 0


def test_offer_query_clamps_paging():
    query = OfferQuery.from_request(limit=500, offset=-5, category=" Bebidas ", search=None)

    assert query.limit == 100
    assert query.offset == 0
    assert query.category == "Bebidas"
    assert OfferQuery.from_request(limit=0, offset=0).limit == 1


def test_discounted_price_never_goes_negative(service):
    percentage = service.create_promotion(promotion_input(discount_value=250))
    fixed = service.create_promotion(promotion_input(discount_type="FIXED_AMOUNT", discount_value=99))

    assert discounted_price(40, percentage) == 0
    assert discounted_price(40, fixed) == 0


def test_offers_products_route(client):
    client.put(
        "/promohub/catalog/products",
        json={"products": [{"id": "cafe", "name": "Cafe Molido", "price": 100, "category": "Bebidas"}]},
    )
    client.post(
        "/promohub/promotions",
        json=promotion_payload(
            name="Promo Permanente",
            discount_value=20,
            start_date="2020-01-01",
            end_date="2099-12-31",
            applicable_product_ids=["cafe"],
        ),
    )

    response = client.get("/promohub/promotions/offers-products", params={"limit": 500})

    assert response.status_code == 200
    assert response.headers["Cache-Control"] == "public, s-maxage=300, stale-while-revalidate=600"
    body = response.json()
    assert body["count"] == 1
    assert body["pagination"] == {"limit": 100, "offset": 0, "total": 1, "pages": 1}
    offer = body["data"][0]
    assert offer["product_id"] == "cafe"
    assert offer["effective_offer_price"] == 80
    assert offer["discount_percent"] == 20
    assert offer["promotion"]["name"] == "Promo Permanente"


def test_offers_products_route_rejects_unknown_sort(client):
    response = client.get("/promohub/promotions/offers-products", params={"sort": "random"})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"
