# Nombre de archivo: errors.py
# Ubicación de archivo: shared_nlp/app/errors.py
# Descripción: Taxonomía de errores del servicio NLP y excepción estructurada

from __future__ import annotations

from enum import Enum
from typing import Any


class NlpErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Código HTTP con el que la API expone cada tipo de error
HTTP_STATUS_BY_CODE: dict[NlpErrorCode, int] = {
    NlpErrorCode.INVALID_INPUT: 400,
    NlpErrorCode.UNSUPPORTED_LANGUAGE: 400,
    NlpErrorCode.RATE_LIMIT_EXCEEDED: 429,
    NlpErrorCode.AUTHENTICATION_ERROR: 502,
    NlpErrorCode.SERVICE_UNAVAILABLE: 503,
    NlpErrorCode.TIMEOUT: 504,
    NlpErrorCode.UNKNOWN_ERROR: 500,
}


class NlpError(Exception):
    """Error estructurado de las operaciones NLP.

    Campos:
    - code: tipo de error dentro de la taxonomía cerrada ``NlpErrorCode``.
    - message: mensaje legible.
    - details: error original u otra información adicional (opaco).
    - request_id: identificador de correlación, si se conoce.
    """

    def __init__(
        self,
        code: NlpErrorCode,
        message: str,
        details: Any = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.request_id = request_id

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_CODE.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.request_id:
            data["request_id"] = self.request_id
        return data

    def __repr__(self) -> str:
        return f"NlpError(code={self.code.value!r}, message={self.message!r})"


__all__ = ["NlpError", "NlpErrorCode", "HTTP_STATUS_BY_CODE"]
