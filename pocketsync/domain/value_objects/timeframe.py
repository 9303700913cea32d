"""
PocketSync – Domain Value Object: Timeframe
=============================================
Marcos temporales soportados por el terminal y su duración en segundos.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict

from pocketsync.domain.exceptions.domain_errors import InvalidTimeframeError


class Timeframe(str, Enum):
    S1 = "1s"
    S5 = "5s"
    S30 = "30s"
    M1 = "1m"
    M5 = "5m"

    @property
    def seconds(self) -> int:
        return TIMEFRAME_SECONDS[self]

    @property
    def millis(self) -> int:
        return TIMEFRAME_SECONDS[self] * 1000

    @classmethod
    def parse(cls, value: "Timeframe | str") -> "Timeframe":
        """Convertir "1m" → Timeframe.M1. Lanza InvalidTimeframeError si no existe."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidTimeframeError(value) from None


TIMEFRAME_SECONDS: Dict[Timeframe, int] = {
    Timeframe.S1: 1,
    Timeframe.S5: 5,
    Timeframe.S30: 30,
    Timeframe.M1: 60,
    Timeframe.M5: 300,
}

# Orden de presentación en el selector del frontend
TIMEFRAMES: tuple[Timeframe, ...] = tuple(Timeframe)
