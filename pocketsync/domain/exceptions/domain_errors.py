"""
PocketSync – Domain Exceptions
================================
Excepciones específicas del dominio de negocio.

JERARQUÍA:
    DomainError (base)
    ├── UnknownAssetError
    └── InvalidTimeframeError
"""

from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class UnknownAssetError(DomainError):
    """El asset_id no existe en el catálogo."""

    def __init__(self, asset_id: str):
        super().__init__(f"Asset desconocido: '{asset_id}'", code="UNKNOWN_ASSET")
        self.asset_id = asset_id


class InvalidTimeframeError(DomainError):
    """Timeframe no soportado o duración no positiva."""

    def __init__(self, value: Optional[Any] = None):
        super().__init__(f"Timeframe inválido: {value!r}", code="INVALID_TIMEFRAME")
        self.value = value
