# Nombre de archivo: constants.py
# Ubicación de archivo: shared_nlp/app/constants.py
# Descripción: Constantes compartidas por el servicio NLP (timeouts, región, modelos)

from __future__ import annotations

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_RETRIES = 3

# Región de Singapur, la más cercana a Vietnam
GOOGLE_CLOUD_REGION = "asia-southeast1"

VERTEX_AI_MODELS = {
    "sentiment_analysis": "text-sentiment",
    "entity_extraction": "text-entity-extraction",
    "text_classification": "text-classification",
}

DEFAULT_LANGUAGE_API_ENDPOINT = "https://language.googleapis.com"
DEFAULT_API_VERSION = "v1"

CONTENT_TYPE_PLAIN_TEXT = "PLAIN_TEXT"
ENCODING_UTF8 = "UTF8"

# Largo máximo del texto que se vuelca en los logs
MAX_LOG_TEXT_CHARS = 5000

DEFAULT_RETRY_OPTIONS = {
    "initial_delay_ms": 100,
    "max_delay_ms": 60000,
    "backoff_multiplier": 1.3,
}
