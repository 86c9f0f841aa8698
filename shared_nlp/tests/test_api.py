# Nombre de archivo: test_api.py
# Ubicación de archivo: shared_nlp/tests/test_api.py
# Descripción: Pruebas de los endpoints HTTP del servicio NLP (respuestas, errores, request id y métricas)

from __future__ import annotations

import asyncio
import uuid

from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from conftest import FakeProvider, build_service
from shared_nlp.app import service as service_module
from shared_nlp.app.errors import NlpError, NlpErrorCode
from shared_nlp.app.main import create_app, nlp_service_dependency
from shared_nlp.app.metrics import reset_metrics


def _app_with(provider: FakeProvider):
    app = create_app()
    service = build_service(provider)
    app.dependency_overrides[nlp_service_dependency] = lambda: service
    return app


def _request(app, method: str, path: str, **kwargs):
    async def _run():
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.request(method, path, **kwargs)

    return asyncio.run(_run())


def test_sentiment_endpoint() -> None:
    app = _app_with(FakeProvider())
    resp = _request(app, "POST", "/v1/sentiment:analyze", json={"text": "Món ăn này rất ngon", "language": "vi"})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["document_sentiment"] == {"score": 0.8, "magnitude": 0.9}
    assert payload["language"] == "vi"
    assert payload["original_text"] == "Món ăn này rất ngon"
    uuid.UUID(resp.headers["X-Request-ID"])


def test_entities_endpoint_filtra() -> None:
    provider = FakeProvider(
        entities={
            "entities": [
                {"name": "phở", "type": "FOOD", "salience": 0.9},
                {"name": "Hà Nội", "type": "LOCATION", "salience": 0.8},
            ]
        }
    )
    app = _app_with(provider)
    resp = _request(app, "POST", "/v1/entities:extract", json={"text": "phở Hà Nội", "entity_types": ["LOCATION"]})

    assert resp.status_code == 200
    assert [e["name"] for e in resp.json()["entities"]] == ["Hà Nội"]


def test_classify_endpoint() -> None:
    provider = FakeProvider(
        categories={"categories": [{"name": "/News", "confidence": 0.3}, {"name": "/Food & Drink", "confidence": 0.8}]}
    )
    app = _app_with(provider)
    resp = _request(app, "POST", "/v1/text:classify", json={"text": "bún chả", "max_categories": 1})

    assert resp.status_code == 200
    assert resp.json()["categories"] == [{"name": "/Food & Drink", "confidence": 0.8}]


def test_texto_vacio_devuelve_400_con_request_id() -> None:
    provider = FakeProvider()
    app = _app_with(provider)
    resp = _request(
        app, "POST", "/v1/sentiment:analyze", json={"text": "   "}, headers={"X-Request-ID": "req-abc"}
    )

    assert resp.status_code == 400
    assert resp.headers["X-Request-ID"] == "req-abc"
    assert resp.json() == {
        "code": "INVALID_INPUT",
        "message": "Text must be a non-empty string",
        "request_id": "req-abc",
    }
    assert provider.calls == []


def test_idioma_no_soportado_devuelve_400() -> None:
    app = _app_with(FakeProvider())
    resp = _request(app, "POST", "/v1/text:classify", json={"text": "bonjour", "language": "fr"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "UNSUPPORTED_LANGUAGE"


def test_errores_del_proveedor_mapean_a_http() -> None:
    error = NlpError(NlpErrorCode.RATE_LIMIT_EXCEEDED, "Provider responded with HTTP 429")
    app = _app_with(FakeProvider(error=error))
    resp = _request(app, "POST", "/v1/sentiment:analyze", json={"text": "ngon"})
    assert resp.status_code == 429
    assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"

    app = _app_with(FakeProvider(error=RuntimeError("boom")))
    resp = _request(app, "POST", "/v1/sentiment:analyze", json={"text": "ngon"})
    assert resp.status_code == 500
    assert resp.json()["message"] == "Failed to perform sentiment analysis."


def test_cuerpo_sin_texto_es_422() -> None:
    app = _app_with(FakeProvider())
    resp = _request(app, "POST", "/v1/sentiment:analyze", json={"language": "vi"})
    assert resp.status_code == 422


def test_health() -> None:
    app = _app_with(FakeProvider())
    resp = _request(app, "GET", "/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "provider": "VERTEX_AI", "ready": False}


def test_metrics_endpoint() -> None:
    reset_metrics()
    app = _app_with(FakeProvider())

    async def _run():
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.post("/v1/sentiment:analyze", json={"text": "ngon"})
            await client.post("/v1/sentiment:analyze", json={"text": "tệ"})
            await client.post("/v1/sentiment:analyze", json={"text": ""})
            return await client.get("/metrics")

    resp = asyncio.run(_run())
    assert resp.status_code == 200
    body = resp.text
    assert 'shared_nlp_requests_total{operation="sentiment",outcome="ok"} 2.0' in body
    assert 'shared_nlp_requests_total{operation="sentiment",outcome="invalid_input"} 1.0' in body
    assert "shared_nlp_request_latency_seconds" in body


def test_request_id_vacio_se_regenera() -> None:
    app = _app_with(FakeProvider())
    resp = _request(app, "GET", "/health", headers={"X-Request-ID": "  "})
    assert resp.status_code == 200
    uuid.UUID(resp.headers["X-Request-ID"])


def test_timeout_como_texto_devuelve_400() -> None:
    provider = FakeProvider()
    app = _app_with(provider)
    resp = _request(app, "POST", "/v1/sentiment:analyze", json={"text": "ngon", "timeout_ms": "500"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Timeout must be a positive number"
    assert provider.calls == []


def test_lifespan_inicializa_y_cierra_el_cliente(monkeypatch) -> None:
    provider = FakeProvider()
    monkeypatch.setattr(service_module, "_service_instance", build_service(provider))

    with TestClient(create_app()) as client:
        resp = client.get("/health")
        assert resp.json()["ready"] is True
        assert provider.closed == 0

    assert provider.closed == 1
