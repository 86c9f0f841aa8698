# Nombre de archivo: __init__.py
# Ubicación de archivo: shared_nlp/app/__init__.py
# Descripción: API pública del servicio NLP compartido

"""Validación, normalización y despacho de solicitudes NLP hacia el proveedor."""

from .config import NlpServiceProvider, ProviderConfiguration, resolve_configuration
from .errors import NlpError, NlpErrorCode
from .schemas import (
    ClassificationRequest,
    ClassificationResponse,
    EntityRequest,
    EntityResponse,
    EntityType,
    Language,
    SentimentRequest,
    SentimentResponse,
)
from .service import NlpService, get_nlp_service

__all__ = [
    "ClassificationRequest",
    "ClassificationResponse",
    "EntityRequest",
    "EntityResponse",
    "EntityType",
    "Language",
    "NlpError",
    "NlpErrorCode",
    "NlpService",
    "NlpServiceProvider",
    "ProviderConfiguration",
    "SentimentRequest",
    "SentimentResponse",
    "get_nlp_service",
    "resolve_configuration",
]
