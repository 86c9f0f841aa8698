# Nombre de archivo: __init__.py
# Ubicación de archivo: core/__init__.py
# Descripción: Inicializa el paquete de utilidades centrales

"""Punto de entrada para utilidades compartidas del proyecto."""

from .logging import request_id_var, setup_logging

__all__ = ["request_id_var", "setup_logging"]
