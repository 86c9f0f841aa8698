# Nombre de archivo: utils.py
# Ubicación de archivo: shared_nlp/app/utils.py
# Descripción: Validaciones, saneamiento de texto y helpers de tiempo/errores para el servicio NLP

from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from .constants import DEFAULT_TIMEOUT_MS
from .errors import NlpError, NlpErrorCode
from .schemas import (
    ClassificationRequest,
    EntityRequest,
    Language,
    NlpRequestBase,
    SentimentRequest,
)

DEFAULT_LANGUAGE = Language.VIETNAMESE

_SENTENCE_BREAK_RE = re.compile(r"([.!?])\s+")
_VIETNAMESE_CHARS_RE = re.compile(
    r"[àáạảãâầấậẩẫăằắặẳẵèéẹẻẽêềếệểễìíịỉĩòóọỏõôồốộổỗơờớợởỡùúụủũưừứựửữỳýỵỷỹđ]",
    re.IGNORECASE,
)
_VIETNAMESE_WORDS_RE = re.compile(
    r"\b(và|hoặc|của|trong|với|là|có|không|này|đó|một|hai|ba|bốn|năm)\b",
    re.IGNORECASE,
)


def is_valid_text(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) > 0


def is_valid_language(value: Any) -> bool:
    try:
        Language(value)
    except ValueError:
        return False
    return True


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0


def validate_request(request: Optional[NlpRequestBase]) -> Optional[NlpError]:
    """Valida una solicitud NLP y devuelve el primer error encontrado.

    El orden importa: solicitud presente, texto, idioma (si viene), timeout (si viene).
    Un texto inválido se reporta aunque el idioma también lo sea.
    """
    if request is None:
        return NlpError(NlpErrorCode.INVALID_INPUT, "Request cannot be null or undefined")
    if not is_valid_text(request.text):
        return NlpError(NlpErrorCode.INVALID_INPUT, "Text must be a non-empty string")
    if request.language and not is_valid_language(request.language):
        language = getattr(request.language, "value", request.language)
        return NlpError(NlpErrorCode.UNSUPPORTED_LANGUAGE, f"Language '{language}' is not supported")
    if request.timeout_ms is not None and not _is_positive_number(request.timeout_ms):
        return NlpError(NlpErrorCode.INVALID_INPUT, "Timeout must be a positive number")
    return None


def create_base_request(
    text: str,
    language: Language = DEFAULT_LANGUAGE,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
) -> NlpRequestBase:
    return NlpRequestBase(text=text, language=language, timeout_ms=timeout_ms)


def create_sentiment_request(
    text: str,
    language: Language = DEFAULT_LANGUAGE,
    analyze_sentences: bool = False,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
) -> SentimentRequest:
    """Arma una solicitud de sentimiento con valores por defecto.

    Ejemplo::

        create_sentiment_request("Món ăn này rất ngon và phục vụ nhanh.", Language.VIETNAMESE, True)
    """
    return SentimentRequest(
        text=text, language=language, timeout_ms=timeout_ms, analyze_sentences=analyze_sentences
    )


def create_entity_request(
    text: str,
    language: Language = DEFAULT_LANGUAGE,
    entity_types: Optional[Iterable[str]] = None,
    min_confidence: Optional[float] = None,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
) -> EntityRequest:
    return EntityRequest(
        text=text,
        language=language,
        timeout_ms=timeout_ms,
        entity_types=list(entity_types) if entity_types is not None else None,
        min_confidence=min_confidence,
    )


def create_classification_request(
    text: str,
    language: Language = DEFAULT_LANGUAGE,
    max_categories: Optional[int] = None,
    min_confidence: Optional[float] = None,
    timeout_ms: float = DEFAULT_TIMEOUT_MS,
) -> ClassificationRequest:
    return ClassificationRequest(
        text=text,
        language=language,
        timeout_ms=timeout_ms,
        max_categories=max_categories,
        min_confidence=min_confidence,
    )


def sanitize_text(text: str) -> str:
    """Quita los caracteres ``<`` y ``>`` y recorta espacios de los extremos."""
    return text.replace("<", "").replace(">", "").strip()


def truncate_text(text: str, max_length: int = 5000) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length]


def split_into_sentences(text: str) -> list[str]:
    """Divide el texto tras cada ``.``, ``!`` o ``?`` seguido de espacios.

    Heurística simple; solo se usa cuando el proveedor no devuelve oraciones.
    """
    pieces = _SENTENCE_BREAK_RE.sub(r"\1\n", text).split("\n")
    return [piece.strip() for piece in pieces if piece.strip()]


def is_likely_vietnamese(text: str) -> bool:
    return bool(_VIETNAMESE_CHARS_RE.search(text) or _VIETNAMESE_WORDS_RE.search(text))


def create_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def calculate_processing_time(start: float) -> float:
    """Milisegundos transcurridos desde ``start`` (tomado con ``time.perf_counter``)."""
    return (time.perf_counter() - start) * 1000


def _error_shape(error: Any) -> tuple[Any, Any]:
    """(code, message) de un error estructurado de terceros, o (None, None)."""
    if isinstance(error, Mapping):
        return error.get("code"), error.get("message")
    return getattr(error, "code", None), getattr(error, "message", None)


def _known_code(value: Any) -> Optional[NlpErrorCode]:
    try:
        return NlpErrorCode(getattr(value, "value", value))
    except (TypeError, ValueError):
        return None


def format_error(
    error: Any,
    code: NlpErrorCode = NlpErrorCode.UNKNOWN_ERROR,
    message: Optional[str] = None,
) -> NlpError:
    """Convierte cualquier error en ``NlpError``.

    - Un ``NlpError`` se devuelve sin cambios.
    - Un valor con ``code`` y ``message`` cuyo código pertenece a ``NlpErrorCode``
      conserva ambos (el original queda en ``details``).
    - El resto queda en ``details`` con ``code``; el mensaje sale de ``message``,
      del mensaje propio del error o del texto recibido.
    """
    if isinstance(error, NlpError):
        return error

    shape_code, shape_message = _error_shape(error)
    if isinstance(shape_message, str) and shape_message:
        known = _known_code(shape_code)
        if known is not None:
            return NlpError(known, shape_message, details=error)

    error_message = message or "An unknown error occurred"
    if isinstance(error, BaseException):
        own = shape_message if isinstance(shape_message, str) and shape_message else str(error)
        error_message = message or own or error_message
    elif isinstance(error, str):
        error_message = message or error or error_message

    return NlpError(code, error_message, details=error)
