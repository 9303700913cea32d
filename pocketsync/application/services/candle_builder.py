"""
PocketSync – Live Candle Builder
==================================
Vela en construcción del bucket activo.

ALGORITMO:
  1. anchor() abre una vela PLANA alineada al bucket del timeframe:
     open = high = low = close = precio actual, volume = 0.
     Es el ÚNICO camino de construcción de velas nuevas: lo usan tanto la
     sincronización del handshake como el stepper al detectar cambio de bucket.
  2. update() ajusta high/low/close y acumula volumen dentro del mismo bucket.
  3. freeze() entrega un Candle inmutable a los observadores.

La vela mutable solo vive dentro de SessionState; nadie fuera del motor
recibe una referencia a ella.
"""

from __future__ import annotations

from dataclasses import dataclass

from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.services.bucket_clock import bucket_start


@dataclass(slots=True)
class LiveCandle:
    """Vela mutable en construcción (solo uso interno del motor)."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @classmethod
    def anchor(cls, now_ms: float, timeframe_seconds: int, price: float) -> "LiveCandle":
        """Vela plana anclada al inicio del bucket que contiene now_ms."""
        return cls(
            time=bucket_start(now_ms, timeframe_seconds),
            open=price,
            high=price,
            low=price,
            close=price,
        )

    def update(self, price: float, volume: float = 0.0) -> None:
        """Actualizar OHLC con un nuevo precio dentro del mismo bucket."""
        self.high = max(self.high, price)
        self.low = min(self.low, price)
        self.close = price
        self.volume += volume

    def freeze(self) -> Candle:
        """Convertir en Candle inmutable."""
        return Candle(
            time=self.time,
            open=self.open,
            high=self.high,
            low=self.low,
            close=self.close,
            volume=self.volume,
        )
