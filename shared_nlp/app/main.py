# Nombre de archivo: main.py
# Ubicación de archivo: shared_nlp/app/main.py
# Descripción: Servidor FastAPI que expone sentimiento, entidades y clasificación de texto

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from core.logging import setup_logging
from core.middlewares import RequestIDMiddleware

from .config import get_settings
from .errors import NlpError
from .metrics import CONTENT_TYPE_LATEST, export_metrics
from .schemas import (
    ClassificationRequest,
    ClassificationResponse,
    EntityRequest,
    EntityResponse,
    SentimentRequest,
    SentimentResponse,
)
from .service import NlpService, get_nlp_service


def nlp_service_dependency() -> NlpService:
    """Dependencia inyectable; las pruebas la reemplazan con un servicio falso."""
    return get_nlp_service()


ServiceDep = Annotated[NlpService, Depends(nlp_service_dependency)]


def create_app() -> FastAPI:
    """Construye la instancia de FastAPI."""

    settings = get_settings()
    logger = setup_logging(settings.service_name, settings.log_level, enable_file=settings.log_to_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = get_nlp_service()
        try:
            await service.init()
        except NlpError as exc:
            # Se reintenta en la primera operación
            logger.warning("action=startup init=failed code=%s message=%s", exc.code.value, exc.message)
        yield
        await service.aclose()

    app = FastAPI(title="shared_nlp", version="0.1.0", lifespan=lifespan)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(NlpError)
    async def nlp_error_handler(request: Request, exc: NlpError) -> JSONResponse:
        if exc.request_id is None:
            exc.request_id = getattr(request.state, "request_id", None)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.post("/v1/sentiment:analyze", response_model=SentimentResponse)
    async def analyze_sentiment_endpoint(req: SentimentRequest, service: ServiceDep) -> SentimentResponse:
        """Analiza el sentimiento del texto (documento y, opcionalmente, oraciones)."""
        return await service.analyze_sentiment(req)

    @app.post("/v1/entities:extract", response_model=EntityResponse)
    async def extract_entities_endpoint(req: EntityRequest, service: ServiceDep) -> EntityResponse:
        return await service.extract_entities(req)

    @app.post("/v1/text:classify", response_model=ClassificationResponse)
    async def classify_text_endpoint(req: ClassificationRequest, service: ServiceDep) -> ClassificationResponse:
        return await service.classify_text(req)

    @app.get("/health")
    async def health(service: ServiceDep) -> dict[str, object]:
        provider = getattr(service.config.provider, "value", service.config.provider)
        return {"status": "ok", "provider": provider, "ready": service.is_ready}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=export_metrics(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
