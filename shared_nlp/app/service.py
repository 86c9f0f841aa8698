# Nombre de archivo: service.py
# Ubicación de archivo: shared_nlp/app/service.py
# Descripción: Fachada del servicio NLP (sentimiento, entidades, clasificación) sobre el proveedor

from __future__ import annotations

import asyncio
import hashlib
import logging
import threading
import time
from typing import Any, Awaitable, Callable, NoReturn, Optional, TypeVar

from pydantic import BaseModel

from core.logging import request_id_var

from .config import ProviderConfiguration, get_settings, resolve_configuration
from .constants import MAX_LOG_TEXT_CHARS, VERTEX_AI_MODELS
from .errors import NlpError, NlpErrorCode
from .metrics import track_request
from .providers import ProviderClient, create_client
from .schemas import (
    ClassificationRequest,
    ClassificationResponse,
    Document,
    Entity,
    EntityMention,
    EntityRequest,
    EntityResponse,
    Language,
    NlpRequestBase,
    ProviderClassificationResult,
    ProviderEntityResult,
    ProviderSentence,
    ProviderSentimentResult,
    SentenceSentiment,
    SentimentRequest,
    SentimentResponse,
    SentimentValue,
    TextCategory,
)
from .utils import (
    calculate_processing_time,
    create_timestamp,
    format_error,
    is_likely_vietnamese,
    sanitize_text,
    split_into_sentences,
    truncate_text,
    validate_request,
)

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProviderConfiguration], Awaitable[ProviderClient]]
_M = TypeVar("_M", bound=BaseModel)


def _coerce(model: type[_M], raw: Any) -> _M:
    if isinstance(raw, model):
        return raw
    return model.model_validate(raw)


def _map_sentences(sentences: list[ProviderSentence]) -> list[SentenceSentiment]:
    return [
        SentenceSentiment(
            text=s.text.content,
            score=s.sentiment.score,
            magnitude=s.sentiment.magnitude,
            begin_offset=s.text.begin_offset,
        )
        for s in sentences
    ]


def _fallback_sentences(text: str, sentiment: SentimentValue) -> list[SentenceSentiment]:
    # El proveedor no devolvió oraciones: se divide localmente y cada oración
    # hereda el sentimiento del documento.
    sentences = []
    cursor = 0
    for piece in split_into_sentences(text):
        offset = text.find(piece, cursor)
        if offset >= 0:
            cursor = offset + len(piece)
        sentences.append(
            SentenceSentiment(text=piece, score=sentiment.score, magnitude=sentiment.magnitude, begin_offset=offset)
        )
    return sentences


class NlpService:
    """Fachada que valida, normaliza y despacha solicitudes NLP al proveedor.

    El cliente del proveedor se crea una sola vez por instancia, en ``init()`` o
    en la primera operación. Llamadas concurrentes durante la inicialización
    comparten el mismo intento (y el mismo error si falla).
    """

    def __init__(
        self,
        config: Optional[ProviderConfiguration] = None,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self.config = resolve_configuration(config)
        self._client_factory = client_factory or create_client
        self._client: Optional[ProviderClient] = None
        self._init_task: Optional[asyncio.Future] = None
        logger.info(
            "action=nlp_service_created provider=%s timeout_ms=%s max_retries=%s",
            getattr(self.config.provider, "value", self.config.provider),
            self.config.default_timeout_ms,
            self.config.max_retries,
        )

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    async def init(self) -> None:
        """Inicializa el cliente del proveedor; no hace nada si ya está listo."""
        if self._client is not None:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._create_client())
        task = self._init_task
        try:
            client = await asyncio.shield(task)
        except NlpError:
            if self._init_task is task:
                self._init_task = None
            raise
        self._client = client

    async def aclose(self) -> None:
        """Libera el cliente del proveedor (si expone ``aclose``) y vuelve al estado inicial."""
        client, self._client = self._client, None
        self._init_task = None
        close = getattr(client, "aclose", None)
        if close is not None:
            await close()
            logger.info("action=close stage=done")

    async def _create_client(self) -> ProviderClient:
        try:
            client = await self._client_factory(self.config)
        except Exception as exc:
            self._raise_wrapped(exc, NlpErrorCode.SERVICE_UNAVAILABLE, "Failed to initialize NLP client.", "init")
        logger.info("action=init stage=done")
        return client

    # --- Operaciones ---------------------------------------------------------

    async def analyze_sentiment(self, request: SentimentRequest) -> SentimentResponse:
        with track_request("sentiment"):
            start = time.perf_counter()
            sanitized = await self._prepare(request, "analyze_sentiment")
            try:
                document = self._build_document(request, sanitized)
                raw = await self._client.analyze_sentiment(document, timeout_ms=request.timeout_ms)
                result = _coerce(ProviderSentimentResult, raw)

                document_sentiment = SentimentValue(
                    score=result.document_sentiment.score,
                    magnitude=result.document_sentiment.magnitude,
                )
                sentences = None
                if request.analyze_sentences:
                    if result.sentences:
                        sentences = _map_sentences(result.sentences)
                    else:
                        sentences = _fallback_sentences(sanitized, document_sentiment)

                response = SentimentResponse(
                    document_sentiment=document_sentiment,
                    sentences=sentences,
                    original_text=request.text,
                    language=self._response_language(request),
                    processing_time_ms=calculate_processing_time(start),
                    timestamp=create_timestamp(),
                )
            except Exception as exc:
                self._raise_wrapped(
                    exc, NlpErrorCode.UNKNOWN_ERROR, "Failed to perform sentiment analysis.", "analyze_sentiment"
                )
            self._log_done("analyze_sentiment", response.processing_time_ms)
            return response

    async def extract_entities(self, request: EntityRequest) -> EntityResponse:
        with track_request("entities"):
            start = time.perf_counter()
            sanitized = await self._prepare(request, "extract_entities")
            try:
                document = self._build_document(request, sanitized)
                raw = await self._client.analyze_entities(document, timeout_ms=request.timeout_ms)
                result = _coerce(ProviderEntityResult, raw)

                entities = [
                    Entity(
                        name=e.name,
                        type=e.type,
                        confidence=e.salience if e.salience is not None else 1.0,
                        mentions=[
                            EntityMention(text=m.text.content, begin_offset=m.text.begin_offset, type=m.type)
                            for m in e.mentions
                        ],
                        metadata=e.metadata,
                    )
                    for e in result.entities
                ]
                entities = [e for e in entities if self._keep_entity(e, request)]

                response = EntityResponse(
                    entities=entities,
                    original_text=request.text,
                    language=self._response_language(request),
                    processing_time_ms=calculate_processing_time(start),
                    timestamp=create_timestamp(),
                )
            except Exception as exc:
                self._raise_wrapped(
                    exc, NlpErrorCode.UNKNOWN_ERROR, "Failed to perform entity extraction.", "extract_entities"
                )
            self._log_done("extract_entities", response.processing_time_ms)
            return response

    async def classify_text(self, request: ClassificationRequest) -> ClassificationResponse:
        with track_request("classification"):
            start = time.perf_counter()
            sanitized = await self._prepare(request, "classify_text")
            try:
                document = self._build_document(request, sanitized, model=self._classification_model())
                raw = await self._client.classify_text(document, timeout_ms=request.timeout_ms)
                result = _coerce(ProviderClassificationResult, raw)

                categories = [
                    TextCategory(name=c.name, confidence=c.confidence if c.confidence is not None else 1.0)
                    for c in result.categories
                ]
                if request.min_confidence is not None:
                    categories = [c for c in categories if c.confidence >= request.min_confidence]
                categories.sort(key=lambda c: c.confidence, reverse=True)
                if request.max_categories is not None:
                    categories = categories[: max(request.max_categories, 0)]

                response = ClassificationResponse(
                    categories=categories,
                    original_text=request.text,
                    language=self._response_language(request),
                    processing_time_ms=calculate_processing_time(start),
                    timestamp=create_timestamp(),
                )
            except Exception as exc:
                self._raise_wrapped(
                    exc, NlpErrorCode.UNKNOWN_ERROR, "Failed to perform text classification.", "classify_text"
                )
            self._log_done("classify_text", response.processing_time_ms)
            return response

    # --- Helpers -------------------------------------------------------------

    async def _prepare(self, request: NlpRequestBase, action: str) -> str:
        """Asegura el cliente, valida la solicitud y devuelve el texto saneado."""
        await self.init()
        error = validate_request(request)
        if error is not None:
            self._stamp(error)
            logger.info("action=%s stage=rejected code=%s message=%s", action, error.code.value, error.message)
            raise error
        self._log_start(action, request)
        return sanitize_text(request.text)

    def _build_document(self, request: NlpRequestBase, content: str, model: Optional[str] = None) -> Document:
        language = request.language or self.config.options.get("default_language") or Language.VIETNAMESE
        return Document(content=content, language=getattr(language, "value", language), model=model)

    def _classification_model(self) -> str:
        models = self.config.options.get("models") or {}
        return models.get("text_classification") or VERTEX_AI_MODELS["text_classification"]

    @staticmethod
    def _response_language(request: NlpRequestBase) -> Language:
        return Language(request.language) if request.language else Language.VIETNAMESE

    @staticmethod
    def _keep_entity(entity: Entity, request: EntityRequest) -> bool:
        if request.entity_types and entity.type not in request.entity_types:
            return False
        if request.min_confidence is not None and entity.confidence < request.min_confidence:
            return False
        return True

    @staticmethod
    def _stamp(error: NlpError) -> NlpError:
        if error.request_id is None:
            error.request_id = request_id_var.get()
        return error

    def _raise_wrapped(self, exc: Exception, code: NlpErrorCode, message: str, action: str) -> NoReturn:
        error = self._stamp(format_error(exc, code, message))
        logger.error("action=%s stage=error code=%s message=%s cause=%r", action, error.code.value, error.message, exc)
        if error is exc:
            raise error
        raise error from exc

    def _log_start(self, action: str, request: NlpRequestBase) -> None:
        if get_settings().log_raw_text:
            logger.info("action=%s stage=start text=%r", action, truncate_text(request.text, MAX_LOG_TEXT_CHARS))
        else:
            digest = hashlib.sha256(request.text.encode()).hexdigest()
            logger.info("action=%s stage=start len_text=%s hash_sha256=%s", action, len(request.text), digest)
        if (request.language or Language.VIETNAMESE) == Language.VIETNAMESE and not is_likely_vietnamese(request.text):
            logger.debug("action=%s diag=language_mismatch declared=vi", action)

    @staticmethod
    def _log_done(action: str, processing_time_ms: float) -> None:
        logger.info("action=%s stage=done processing_time_ms=%.2f", action, processing_time_ms)


_service_lock = threading.Lock()
_service_instance: Optional[NlpService] = None


def get_nlp_service(config: Optional[ProviderConfiguration] = None) -> NlpService:
    """Instancia compartida del servicio.

    Con ``config`` se crea una instancia nueva que reemplaza a la anterior; el
    reemplazo está protegido por un lock.
    """
    global _service_instance
    with _service_lock:
        if _service_instance is None or config is not None:
            _service_instance = NlpService(config)
        return _service_instance


__all__ = ["NlpService", "get_nlp_service"]
