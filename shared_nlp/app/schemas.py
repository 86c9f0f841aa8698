# Nombre de archivo: schemas.py
# Ubicación de archivo: shared_nlp/app/schemas.py
# Descripción: Esquemas pydantic para solicitudes, respuestas y contrato con el proveedor NLP

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .constants import CONTENT_TYPE_PLAIN_TEXT, ENCODING_UTF8


class Language(str, Enum):
    VIETNAMESE = "vi"
    ENGLISH = "en"


class EntityType(str, Enum):
    UNKNOWN = "UNKNOWN"
    PERSON = "PERSON"
    LOCATION = "LOCATION"
    ORGANIZATION = "ORGANIZATION"
    EVENT = "EVENT"
    WORK_OF_ART = "WORK_OF_ART"
    CONSUMER_GOOD = "CONSUMER_GOOD"
    FOOD = "FOOD"
    DISH = "DISH"
    INGREDIENT = "INGREDIENT"
    DATE = "DATE"
    NUMBER = "NUMBER"
    PRICE = "PRICE"
    ADDRESS = "ADDRESS"
    PHONE_NUMBER = "PHONE_NUMBER"
    EMAIL = "EMAIL"
    URL = "URL"
    OTHER = "OTHER"


# --- Solicitudes -------------------------------------------------------------
# language y timeout_ms no se restringen acá: validate_request decide el tipo de error.


class NlpRequestBase(BaseModel):
    text: str = Field(..., description="Texto a analizar")
    language: Optional[str] = Field(default=None, description="Idioma (vi|en); por defecto vi")
    # Sin coerción: validate_request rechaza lo que no sea número (True, "500")
    timeout_ms: Any = Field(default=None, description="Timeout de la solicitud en ms")


class SentimentRequest(NlpRequestBase):
    analyze_sentences: bool = Field(default=False, description="Analizar sentimiento por oración")


class EntityRequest(NlpRequestBase):
    entity_types: Optional[list[str]] = Field(default=None, description="Tipos de entidad a conservar")
    min_confidence: Optional[float] = None


class ClassificationRequest(NlpRequestBase):
    max_categories: Optional[int] = None
    min_confidence: Optional[float] = None


# --- Respuestas --------------------------------------------------------------


class NlpResponseBase(BaseModel):
    original_text: str
    language: Language
    processing_time_ms: float
    timestamp: str


class SentimentValue(BaseModel):
    score: float
    magnitude: float


class SentenceSentiment(BaseModel):
    text: str
    score: float
    magnitude: float
    begin_offset: int


class SentimentResponse(NlpResponseBase):
    document_sentiment: SentimentValue
    sentences: Optional[list[SentenceSentiment]] = None


class EntityMention(BaseModel):
    text: str
    begin_offset: int
    type: str


class Entity(BaseModel):
    name: str
    type: str
    confidence: float
    mentions: list[EntityMention] = Field(default_factory=list)
    metadata: Optional[dict[str, str]] = None


class EntityResponse(NlpResponseBase):
    entities: list[Entity] = Field(default_factory=list)


class TextCategory(BaseModel):
    name: str
    confidence: float


class ClassificationResponse(NlpResponseBase):
    categories: list[TextCategory] = Field(default_factory=list)


# --- Contrato con el proveedor ----------------------------------------------
# Formato JSON de Google Natural Language (camelCase).


class _ProviderModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Document(_ProviderModel):
    """Descriptor normalizado que se envía al proveedor."""

    content: str
    type: str = CONTENT_TYPE_PLAIN_TEXT
    language: str
    encoding_type: Optional[str] = ENCODING_UTF8
    model: Optional[str] = None

    def to_request_body(self, include_model: bool = False, include_encoding: bool = True) -> dict[str, Any]:
        # classifyText no acepta encodingType
        body: dict[str, Any] = {
            "document": {"content": self.content, "type": self.type, "language": self.language},
        }
        if include_encoding and self.encoding_type:
            body["encodingType"] = self.encoding_type
        if include_model and self.model:
            body["model"] = self.model
        return body


class TextSpan(_ProviderModel):
    content: str
    begin_offset: int = -1


class _SpanHolder(_ProviderModel):
    text: TextSpan

    @model_validator(mode="before")
    @classmethod
    def _wrap_plain_text(cls, data: Any) -> Any:
        # Acepta {"text": "...", "beginOffset": n} además de {"text": {"content", "beginOffset"}}
        if isinstance(data, dict) and isinstance(data.get("text"), str):
            data = dict(data)
            offset = data.pop("beginOffset", data.pop("begin_offset", -1))
            data["text"] = {"content": data["text"], "beginOffset": offset}
        return data


class ProviderSentiment(_ProviderModel):
    score: float = 0.0
    magnitude: float = 0.0


class ProviderSentence(_SpanHolder):
    sentiment: ProviderSentiment = Field(default_factory=ProviderSentiment)


class ProviderSentimentResult(_ProviderModel):
    document_sentiment: ProviderSentiment
    sentences: Optional[list[ProviderSentence]] = None


class ProviderMention(_SpanHolder):
    type: str = "TYPE_UNKNOWN"


class ProviderEntity(_ProviderModel):
    name: str
    type: str = EntityType.UNKNOWN.value
    salience: Optional[float] = None
    mentions: list[ProviderMention] = Field(default_factory=list)
    metadata: Optional[dict[str, str]] = None


class ProviderEntityResult(_ProviderModel):
    entities: list[ProviderEntity] = Field(default_factory=list)


class ProviderCategory(_ProviderModel):
    name: str
    confidence: Optional[float] = None


class ProviderClassificationResult(_ProviderModel):
    categories: list[ProviderCategory] = Field(default_factory=list)
