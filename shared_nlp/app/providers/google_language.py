# Nombre de archivo: google_language.py
# Ubicación de archivo: shared_nlp/app/providers/google_language.py
# Descripción: Cliente HTTP para la API REST de Google Cloud Natural Language

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..config import ProviderConfiguration
from ..constants import DEFAULT_API_VERSION, DEFAULT_LANGUAGE_API_ENDPOINT, DEFAULT_RETRY_OPTIONS
from ..errors import NlpError, NlpErrorCode
from ..schemas import (
    Document,
    ProviderClassificationResult,
    ProviderEntityResult,
    ProviderSentimentResult,
)

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


def _status_error(exc: httpx.HTTPStatusError) -> NlpError:
    status = exc.response.status_code
    if status == 429:
        code = NlpErrorCode.RATE_LIMIT_EXCEEDED
    elif status in (401, 403):
        code = NlpErrorCode.AUTHENTICATION_ERROR
    else:
        code = NlpErrorCode.UNKNOWN_ERROR
    return NlpError(code, f"Provider responded with HTTP {status}", details=exc.response.text)


class GoogleLanguageClient:
    """Implementa ProviderClient sobre ``POST /{version}/documents:<método>``.

    - ``credentials`` viaja como parámetro ``key``.
    - El timeout por llamada se aplica vía httpx.
    - 429, 5xx y errores de transporte se reintentan hasta ``max_retries`` veces.
    """

    def __init__(self, config: ProviderConfiguration, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.config = config
        self.api_version = config.options.get("api_version", DEFAULT_API_VERSION)
        # La API pública de Google rechaza campos desconocidos como "model";
        # solo se envía a un endpoint propio
        self.include_model = bool(config.endpoint)
        retry_options = {**DEFAULT_RETRY_OPTIONS, **config.options.get("retry", {})}
        self._wait = wait_exponential(
            multiplier=retry_options["initial_delay_ms"] / 1000,
            max=retry_options["max_delay_ms"] / 1000,
            exp_base=retry_options["backoff_multiplier"],
        )
        self._http = httpx.AsyncClient(
            base_url=config.endpoint or DEFAULT_LANGUAGE_API_ENDPOINT,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def analyze_sentiment(
        self, document: Document, timeout_ms: Optional[float] = None
    ) -> ProviderSentimentResult:
        data = await self._post("analyzeSentiment", document.to_request_body(self.include_model), timeout_ms)
        return ProviderSentimentResult.model_validate(data)

    async def analyze_entities(self, document: Document, timeout_ms: Optional[float] = None) -> ProviderEntityResult:
        data = await self._post("analyzeEntities", document.to_request_body(self.include_model), timeout_ms)
        return ProviderEntityResult.model_validate(data)

    async def classify_text(
        self, document: Document, timeout_ms: Optional[float] = None
    ) -> ProviderClassificationResult:
        body = document.to_request_body(self.include_model, include_encoding=False)
        data = await self._post("classifyText", body, timeout_ms)
        return ProviderClassificationResult.model_validate(data)

    async def _post(self, method: str, body: dict[str, Any], timeout_ms: Optional[float]) -> Any:
        url = f"/{self.api_version}/documents:{method}"
        timeout = (timeout_ms or self.config.default_timeout_ms) / 1000
        params = {"key": self.config.credentials} if self.config.credentials else None
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(self.config.max_retries, 0) + 1),
            wait=self._wait,
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    resp = await self._http.post(url, json=body, params=params, timeout=timeout)
                    resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise NlpError(NlpErrorCode.TIMEOUT, f"Provider call {method} timed out after {timeout:.3f}s", details=exc) from exc
        except httpx.HTTPStatusError as exc:
            raise _status_error(exc) from exc
        except httpx.TransportError as exc:
            raise NlpError(NlpErrorCode.UNKNOWN_ERROR, f"Provider call {method} failed: {exc}", details=exc) from exc
        logger.debug("action=provider_call method=%s status=%s", method, resp.status_code)
        return orjson.loads(resp.content)
