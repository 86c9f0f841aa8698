# Nombre de archivo: base.py
# Ubicación de archivo: shared_nlp/app/providers/base.py
# Descripción: Contrato que debe cumplir cualquier cliente de proveedor NLP

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from ..schemas import (
    Document,
    ProviderClassificationResult,
    ProviderEntityResult,
    ProviderSentimentResult,
)

SentimentPayload = Union[ProviderSentimentResult, Mapping[str, Any]]
EntityPayload = Union[ProviderEntityResult, Mapping[str, Any]]
ClassificationPayload = Union[ProviderClassificationResult, Mapping[str, Any]]


@runtime_checkable
class ProviderClient(Protocol):
    """Cliente asincrónico de un backend NLP externo.

    Cada método recibe el documento normalizado y devuelve el resultado del
    proveedor, ya tipado o como mapeo con el formato JSON del proveedor (el
    servicio lo valida al recibirlo). ``timeout_ms`` es el límite pedido por
    el llamador; ``None`` significa usar el de la configuración.
    """

    async def analyze_sentiment(self, document: Document, timeout_ms: Optional[float] = None) -> SentimentPayload:
        ...

    async def analyze_entities(self, document: Document, timeout_ms: Optional[float] = None) -> EntityPayload:
        ...

    async def classify_text(self, document: Document, timeout_ms: Optional[float] = None) -> ClassificationPayload:
        ...
