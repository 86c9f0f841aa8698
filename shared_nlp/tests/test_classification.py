# Nombre de archivo: test_classification.py
# Ubicación de archivo: shared_nlp/tests/test_classification.py
# Descripción: Pruebas de clasificación de texto (orden, truncado, confianza mínima, modelo)

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeProvider, build_service
from shared_nlp.app.config import ProviderConfiguration
from shared_nlp.app.errors import NlpError, NlpErrorCode
from shared_nlp.app.schemas import ClassificationRequest

TEXT = "Bánh mì của quán này rất ngon, đặc biệt là phần nhân thịt và rau sống."

CATEGORIES = {
    "categories": [
        {"name": "/Food & Drink/Desserts/Ice Cream", "confidence": 0.75},
        {"name": "/Food & Drink/Vietnamese Cuisine/Bánh Mì", "confidence": 0.92},
        {"name": "/Food & Drink/Restaurants", "confidence": 0.6},
    ]
}


def _classify(service, request):
    return asyncio.run(service.classify_text(request))


def test_categorias_ordenadas_por_confianza() -> None:
    resp = _classify(build_service(FakeProvider(categories=CATEGORIES)), ClassificationRequest(text=TEXT))
    assert [c.confidence for c in resp.categories] == [0.92, 0.75, 0.6]
    assert resp.original_text == TEXT


def test_max_categories_uno() -> None:
    resp = _classify(
        build_service(FakeProvider(categories=CATEGORIES)), ClassificationRequest(text=TEXT, max_categories=1)
    )
    assert len(resp.categories) == 1
    assert resp.categories[0].name == "/Food & Drink/Vietnamese Cuisine/Bánh Mì"
    assert resp.categories[0].confidence == 0.92


def test_confianza_minima_antes_del_truncado() -> None:
    request = ClassificationRequest(text=TEXT, min_confidence=0.7, max_categories=5)
    resp = _classify(build_service(FakeProvider(categories=CATEGORIES)), request)
    assert [c.confidence for c in resp.categories] == [0.92, 0.75]


def test_sin_confianza_se_asume_uno() -> None:
    provider = FakeProvider(categories={"categories": [{"name": "/Food & Drink", "confidence": 0.5}, {"name": "/News"}]})
    resp = _classify(build_service(provider), ClassificationRequest(text=TEXT))
    assert [c.name for c in resp.categories] == ["/News", "/Food & Drink"]
    assert resp.categories[0].confidence == 1.0


def test_modelo_por_defecto_en_el_documento() -> None:
    provider = FakeProvider(categories=CATEGORIES)
    _classify(build_service(provider), ClassificationRequest(text=TEXT))
    document = provider.calls[0][1]
    assert document.model == "text-classification"
    assert document.content == TEXT


def test_modelo_desde_la_configuracion() -> None:
    provider = FakeProvider(categories=CATEGORIES)
    config = ProviderConfiguration(options={"models": {"text_classification": "fnb-classifier-v2"}})
    _classify(build_service(provider, config), ClassificationRequest(text=TEXT))
    assert provider.calls[0][1].model == "fnb-classifier-v2"


def test_error_del_proveedor() -> None:
    provider = FakeProvider(error=KeyError("categories"))
    with pytest.raises(NlpError) as exc_info:
        _classify(build_service(provider), ClassificationRequest(text=TEXT))
    assert exc_info.value.code == NlpErrorCode.UNKNOWN_ERROR
    assert exc_info.value.message == "Failed to perform text classification."
