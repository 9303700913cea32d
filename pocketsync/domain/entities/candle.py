"""
PocketSync – Domain Entity: Candle
====================================
Vela OHLCV inmutable.

Decisiones de diseño:
- frozen=True → los observadores reciben snapshots que no pueden alterar
  el estado interno del motor.
- time está en MILISEGUNDOS y es el inicio del bucket del timeframe.
- Se usa dataclass por rendimiento (más ligera que Pydantic para hot-path).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Candle:
    """Vela OHLCV con timestamp de apertura (ms)."""

    time: int        # inicio del bucket en ms (múltiplo de timeframe*1000)
    open: float
    high: float
    low: float
    close: float
    volume: float

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    def to_dict(self) -> dict:
        """Serialización para WebSocket / frontend."""
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }
