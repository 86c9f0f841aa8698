# Nombre de archivo: runner.py
# Ubicación de archivo: shared_nlp/app/runner.py
# Descripción: Punto de arranque del servidor Uvicorn para el servicio NLP

"""Motor de arranque del servicio NLP compartido."""

from __future__ import annotations

import logging
import sys

import uvicorn

from .config import Settings, get_settings

LOGGER = logging.getLogger(__name__)


def build_server_config(settings: Settings) -> uvicorn.Config:
    return uvicorn.Config(
        "shared_nlp.app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    settings = get_settings()
    server = uvicorn.Server(config=build_server_config(settings))
    try:
        server.run()
    except Exception as exc:  # pragma: no cover - rutas críticas de arranque
        LOGGER.error("Fallo crítico al iniciar el servicio: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
