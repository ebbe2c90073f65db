from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.promohub.core.errors import setup_exception_handlers
from app.promohub.core.metrics import metrics


def test_unhandled_error_returns_internal_error_envelope():
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "INTERNAL_ERROR"
    assert body["details"] == {"type": "RuntimeError"}


def test_promotion_activity_is_counted(client):
    metrics.reset()

    client.post(
        "/promohub/promotions",
        json={
            "name": "Promo Metrica",
            "description": "Conteo",
            "discount_type": "PERCENTAGE",
            "discount_value": 5,
            "start_date": "2025-01-01",
            "end_date": "2025-01-02",
        },
    )
    client.get("/promohub/promotions")
    client.get("/promohub/promotions")

    response = client.get("/promohub/ops/metrics")
    content = response.text

    assert response.status_code == 200
    if metrics.enabled:
        assert 'promotion_mutations_total{action="create"} 1.0' in content
        assert 'promotion_listing_cache_total{result="hit"} 1.0' in content
        assert 'promotion_listing_cache_total{result="miss"} 1.0' in content
        assert "http_requests_total" in content
    else:
        assert "metrics_disabled" in content
