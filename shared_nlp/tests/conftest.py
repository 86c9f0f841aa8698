# Nombre de archivo: conftest.py
# Ubicación de archivo: shared_nlp/tests/conftest.py
# Descripción: Configuraciones comunes para Pytest (PYTHONPATH y proveedor NLP falso)

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:  # pragma: no cover - inicialización
    sys.path.insert(0, str(ROOT_DIR))

from shared_nlp.app.config import ProviderConfiguration  # noqa: E402
from shared_nlp.app.schemas import Document  # noqa: E402
from shared_nlp.app.service import NlpService  # noqa: E402


class FakeProvider:
    """Proveedor en memoria: devuelve payloads fijos y registra cada llamada."""

    def __init__(
        self,
        sentiment: Optional[dict[str, Any]] = None,
        entities: Optional[dict[str, Any]] = None,
        categories: Optional[dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.sentiment = sentiment or {"documentSentiment": {"score": 0.8, "magnitude": 0.9}}
        self.entities = entities or {"entities": []}
        self.categories = categories or {"categories": []}
        self.error = error
        self.calls: list[tuple[str, Document, Optional[float]]] = []
        self.closed = 0

    async def _respond(self, method: str, document: Document, timeout_ms: Optional[float], payload: Any) -> Any:
        self.calls.append((method, document, timeout_ms))
        if self.error is not None:
            raise self.error
        return payload

    async def analyze_sentiment(self, document: Document, timeout_ms: Optional[float] = None) -> Any:
        return await self._respond("analyze_sentiment", document, timeout_ms, self.sentiment)

    async def analyze_entities(self, document: Document, timeout_ms: Optional[float] = None) -> Any:
        return await self._respond("analyze_entities", document, timeout_ms, self.entities)

    async def classify_text(self, document: Document, timeout_ms: Optional[float] = None) -> Any:
        return await self._respond("classify_text", document, timeout_ms, self.categories)

    async def aclose(self) -> None:
        self.closed += 1


class CountingFactory:
    """Fábrica de clientes que cuenta cuántas veces se inicializó."""

    def __init__(self, provider: FakeProvider) -> None:
        self.provider = provider
        self.calls = 0

    async def __call__(self, config: ProviderConfiguration) -> FakeProvider:
        self.calls += 1
        return self.provider


def build_service(provider: FakeProvider, config: Optional[ProviderConfiguration] = None) -> NlpService:
    return NlpService(config or ProviderConfiguration(), client_factory=CountingFactory(provider))


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def nlp_service(fake_provider: FakeProvider) -> NlpService:
    return build_service(fake_provider)
