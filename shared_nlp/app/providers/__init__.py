# Nombre de archivo: __init__.py
# Ubicación de archivo: shared_nlp/app/providers/__init__.py
# Descripción: Selección e inicialización del cliente de proveedor NLP

from __future__ import annotations

import logging

from ..config import NlpServiceProvider, ProviderConfiguration
from .base import ProviderClient
from .google_language import GoogleLanguageClient

logger = logging.getLogger(__name__)


async def create_client(config: ProviderConfiguration) -> ProviderClient:
    """Construye el cliente para el proveedor configurado.

    VERTEX_AI y GOOGLE_CLOUD_NLP hablan el contrato REST de Natural Language;
    CUSTOM exige un endpoint propio con el mismo contrato.
    """
    provider = NlpServiceProvider(config.provider)
    if provider == NlpServiceProvider.CUSTOM and not config.endpoint:
        raise ValueError("El proveedor CUSTOM requiere NLP_API_ENDPOINT (endpoint)")
    logger.info("action=init_client provider=%s endpoint=%s", provider.value, config.endpoint or "default")
    return GoogleLanguageClient(config)


__all__ = ["ProviderClient", "GoogleLanguageClient", "create_client"]
