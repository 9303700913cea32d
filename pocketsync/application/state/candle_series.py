"""
PocketSync – Candle Series (lado consumidor)
==============================================
Serie ordenada de velas con `time` estrictamente creciente.

PROTECCIÓN DE MEMORIA:
- deque(maxlen=N) descarta automáticamente la vela más antigua cuando se
  excede el límite (100 por defecto). O(1) en append.

UPSERT:
- Vela con time distinto al de la última → se agrega al final.
- Misma time → reemplaza a la última (actualización intra-bucket).
- time anterior a la última → snapshot atrasado, se ignora.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Optional

from pocketsync.domain.entities.candle import Candle

MAX_SERIES_CANDLES = 100


class CandleSeries:
    def __init__(self, max_size: int = MAX_SERIES_CANDLES) -> None:
        self._candles: deque[Candle] = deque(maxlen=max_size)

    def replace(self, history: Iterable[Candle]) -> None:
        """Reemplazar toda la serie (conserva las N más recientes)."""
        self._candles.clear()
        self._candles.extend(history)

    def upsert(self, candle: Candle) -> bool:
        """Agregar o actualizar la última vela. Retorna True si se agregó una nueva."""
        if self._candles:
            last = self._candles[-1]
            if candle.time == last.time:
                self._candles[-1] = candle
                return False
            if candle.time < last.time:
                return False
        self._candles.append(candle)
        return True

    def clear(self) -> None:
        self._candles.clear()

    def last(self, count: Optional[int] = None) -> List[Candle]:
        """Últimas N velas (todas si count es None)."""
        if count is None:
            return list(self._candles)
        if count <= 0:
            return []
        return list(self._candles)[-count:]

    def to_list(self) -> List[Candle]:
        return list(self._candles)

    @property
    def latest(self) -> Optional[Candle]:
        return self._candles[-1] if self._candles else None

    @property
    def max_size(self) -> int:
        return self._candles.maxlen or 0

    def __len__(self) -> int:
        return len(self._candles)

    def __iter__(self):
        return iter(self._candles)
