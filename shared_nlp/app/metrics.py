# Nombre de archivo: metrics.py
# Ubicación de archivo: shared_nlp/app/metrics.py
# Descripción: Exposición de métricas Prometheus para las operaciones NLP

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from .errors import NlpError

REGISTRY = CollectorRegistry()


def _build_collectors() -> tuple[Counter, Histogram]:
    count = Counter(
        "shared_nlp_requests_total",
        "Total de operaciones NLP procesadas",
        ["operation", "outcome"],
        registry=REGISTRY,
    )
    latency = Histogram(
        "shared_nlp_request_latency_seconds",
        "Latencia de las operaciones NLP en segundos",
        ["operation"],
        registry=REGISTRY,
    )
    return count, latency


REQUEST_COUNT, REQUEST_LATENCY = _build_collectors()


def record_request(operation: str, outcome: str, latency: float) -> None:
    """Registra una operación, su resultado y su latencia."""
    REQUEST_COUNT.labels(operation=operation, outcome=outcome).inc()
    REQUEST_LATENCY.labels(operation=operation).observe(latency)


@contextmanager
def track_request(operation: str) -> Iterator[None]:
    """Mide el bloque y lo registra con outcome ``ok`` o el código de error en minúsculas."""
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except NlpError as exc:
        outcome = exc.code.value.lower()
        raise
    except Exception:
        outcome = "unknown_error"
        raise
    finally:
        record_request(operation, outcome, time.perf_counter() - start)


def export_metrics() -> bytes:
    """Devuelve las métricas en formato Prometheus."""
    return generate_latest(REGISTRY)


def reset_metrics() -> None:
    """Restablece los contadores; se usa solo en las pruebas."""
    global REQUEST_COUNT, REQUEST_LATENCY
    REGISTRY.unregister(REQUEST_COUNT)
    REGISTRY.unregister(REQUEST_LATENCY)
    REQUEST_COUNT, REQUEST_LATENCY = _build_collectors()


__all__ = ["record_request", "track_request", "export_metrics", "reset_metrics", "CONTENT_TYPE_LATEST"]
