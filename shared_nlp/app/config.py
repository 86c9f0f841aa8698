# Nombre de archivo: config.py
# Ubicación de archivo: shared_nlp/app/config.py
# Descripción: Configuración del proveedor NLP (presets + variables de entorno) y settings del servicio

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Any, Optional

from .constants import (
    DEFAULT_API_VERSION,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_OPTIONS,
    DEFAULT_TIMEOUT_MS,
    GOOGLE_CLOUD_REGION,
    VERTEX_AI_MODELS,
)

logger = logging.getLogger(__name__)


class NlpServiceProvider(str, Enum):
    VERTEX_AI = "VERTEX_AI"
    GOOGLE_CLOUD_NLP = "GOOGLE_CLOUD_NLP"
    CUSTOM = "CUSTOM"


DEFAULT_SERVICE_PROVIDER = NlpServiceProvider.VERTEX_AI

# Variables de entorno reconocidas por resolve_configuration
ENV_SERVICE_PROVIDER = "NLP_SERVICE_PROVIDER"
ENV_PROJECT = "GOOGLE_CLOUD_PROJECT"
ENV_REGION = "GOOGLE_CLOUD_REGION"
ENV_API_KEY = "NLP_API_KEY"
ENV_API_ENDPOINT = "NLP_API_ENDPOINT"
ENV_REQUEST_TIMEOUT_MS = "NLP_REQUEST_TIMEOUT_MS"
ENV_MAX_RETRIES = "NLP_MAX_RETRIES"


@dataclass
class ProviderConfiguration:
    provider: NlpServiceProvider = DEFAULT_SERVICE_PROVIDER
    credentials: Optional[str] = None
    endpoint: Optional[str] = None
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    options: dict[str, Any] = field(default_factory=dict)


DEFAULT_NLP_CONFIG = ProviderConfiguration(
    provider=DEFAULT_SERVICE_PROVIDER,
    options={"region": GOOGLE_CLOUD_REGION},
)

VERTEX_AI_CONFIG = ProviderConfiguration(
    provider=NlpServiceProvider.VERTEX_AI,
    options={
        "region": GOOGLE_CLOUD_REGION,
        "models": dict(VERTEX_AI_MODELS),
        "use_application_default_credentials": True,
        "enable_batching": True,
        "retry": dict(DEFAULT_RETRY_OPTIONS),
    },
)

GOOGLE_CLOUD_NLP_CONFIG = ProviderConfiguration(
    provider=NlpServiceProvider.GOOGLE_CLOUD_NLP,
    options={
        "use_application_default_credentials": True,
        "api_version": DEFAULT_API_VERSION,
    },
)

_PRESETS = {
    NlpServiceProvider.VERTEX_AI: VERTEX_AI_CONFIG,
    NlpServiceProvider.GOOGLE_CLOUD_NLP: GOOGLE_CLOUD_NLP_CONFIG,
}


def get_provider_preset(provider: Any) -> ProviderConfiguration:
    """Devuelve una copia del preset del proveedor (o del preset base si no hay uno)."""
    try:
        identity = NlpServiceProvider(provider)
    except ValueError:
        logger.warning("action=config provider_desconocido=%s fallback=%s", provider, DEFAULT_SERVICE_PROVIDER.value)
        return copy.deepcopy(DEFAULT_NLP_CONFIG)
    preset = _PRESETS.get(identity)
    if preset is None:
        config = copy.deepcopy(DEFAULT_NLP_CONFIG)
        config.provider = identity
        return config
    return copy.deepcopy(preset)


def _env_int(name: str) -> int:
    raw = os.environ[name]
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} debe ser un entero (valor recibido: {raw!r})") from exc


def load_config_from_env() -> ProviderConfiguration:
    provider = os.getenv(ENV_SERVICE_PROVIDER) or DEFAULT_SERVICE_PROVIDER
    config = get_provider_preset(provider)

    # Orden fijo de overrides
    if os.getenv(ENV_PROJECT):
        config.options = {**config.options, "project_id": os.environ[ENV_PROJECT]}
    if os.getenv(ENV_REGION):
        config.options = {**config.options, "region": os.environ[ENV_REGION]}
    if os.getenv(ENV_API_KEY):
        config.credentials = os.environ[ENV_API_KEY]
    if os.getenv(ENV_API_ENDPOINT):
        config.endpoint = os.environ[ENV_API_ENDPOINT]
    if os.getenv(ENV_REQUEST_TIMEOUT_MS):
        config.default_timeout_ms = _env_int(ENV_REQUEST_TIMEOUT_MS)
    if os.getenv(ENV_MAX_RETRIES):
        config.max_retries = _env_int(ENV_MAX_RETRIES)
    return config


def resolve_configuration(explicit_config: Optional[ProviderConfiguration] = None) -> ProviderConfiguration:
    """Configuración efectiva del proveedor.

    Una configuración explícita se usa tal cual (sin mezclar entorno). Si no hay,
    se parte del preset del proveedor declarado en NLP_SERVICE_PROVIDER y se
    aplican los overrides de entorno.
    """
    if explicit_config is not None:
        return explicit_config
    return load_config_from_env()


@dataclass(slots=True)
class Settings:
    """Parámetros del servicio HTTP (no del proveedor)."""

    service_name: str
    log_level: str
    log_to_file: bool
    log_raw_text: bool
    host: str
    port: int

    def __init__(self) -> None:
        self.service_name = os.getenv("NLP_SERVICE_NAME", "shared_nlp")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_to_file = os.getenv("LOG_TO_FILE", "false").lower() in ("true", "1", "yes")
        self.log_raw_text = os.getenv("LOG_RAW_TEXT", "true").lower() in ("true", "1", "yes")
        self.host = os.getenv("NLP_HOST", "0.0.0.0")
        self.port = int(os.getenv("NLP_PORT", "8100"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = [
    "NlpServiceProvider",
    "ProviderConfiguration",
    "DEFAULT_NLP_CONFIG",
    "VERTEX_AI_CONFIG",
    "GOOGLE_CLOUD_NLP_CONFIG",
    "get_provider_preset",
    "load_config_from_env",
    "resolve_configuration",
    "Settings",
    "get_settings",
]
