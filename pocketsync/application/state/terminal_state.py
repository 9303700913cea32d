"""
PocketSync – Terminal State
=============================
Estado del terminal que consume los MarketSnapshot del motor: lo que el
frontend muestra (precio, serie de velas, log de paquetes, sentimiento y
cuenta regresiva de la vela).

REGLAS:
- Cualquier status distinto de `synced` significa "sin velas válidas":
  se limpia la serie y el precio vuelve a 0.
- history (solo en la sincronización) reemplaza la serie completa.
- candle hace upsert sobre la última vela.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, List, Optional

from pocketsync.application.dto.market_snapshot import MarketSnapshot
from pocketsync.application.state.candle_series import MAX_SERIES_CANDLES, CandleSeries
from pocketsync.domain.services.bucket_clock import next_bucket_start
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import Timeframe

LOG_SIZE = 5
SENTIMENT_WINDOW = 15
NEUTRAL_SENTIMENT = 50.0


class TerminalState:
    def __init__(
        self,
        max_candles: int = MAX_SERIES_CANDLES,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._clock = clock or (lambda: time.time() * 1000)
        self.series = CandleSeries(max_candles)
        self.status: ConnectionStatus = ConnectionStatus.DISCONNECTED
        self.current_price: float = 0.0
        self.asset_id: str = ""
        self.timeframe: str = ""
        self._logs: deque[str] = deque(maxlen=LOG_SIZE)

    def apply(self, snapshot: MarketSnapshot) -> None:
        """Aplicar un snapshot del motor (se usa como callback del hub)."""
        self.status = snapshot.status
        self.asset_id = snapshot.asset_id
        self.timeframe = snapshot.timeframe

        if snapshot.packet_info:
            self.log(snapshot.packet_info)

        if snapshot.status is not ConnectionStatus.SYNCED:
            self.series.clear()
            self.current_price = 0.0
            return

        if snapshot.history is not None:
            self.series.replace(snapshot.history)

        self.current_price = snapshot.price

        if snapshot.candle is not None:
            self.series.upsert(snapshot.candle)

    def log(self, message: str) -> None:
        """Agregar una línea al log (más reciente primero)."""
        self._logs.appendleft(message)

    def reset_log(self, message: str) -> None:
        """Reemplazar el log por una sola línea."""
        self._logs.clear()
        self._logs.append(message)

    @property
    def logs(self) -> List[str]:
        return list(self._logs)

    @property
    def sentiment(self) -> float:
        """% de velas alcistas en las últimas 15 (50 si no hay velas)."""
        window = self.series.last(SENTIMENT_WINDOW)
        if not window:
            return NEUTRAL_SENTIMENT
        bulls = sum(1 for c in window if c.is_bullish)
        return bulls / len(window) * 100

    def countdown(self, now_ms: Optional[float] = None) -> str:
        """MM:SS hasta el cierre de la vela viva ("--:--" sin datos)."""
        latest = self.series.latest
        if latest is None or not self.timeframe or self.status is not ConnectionStatus.SYNCED:
            return "--:--"
        now = self._clock() if now_ms is None else now_ms
        tf_seconds = Timeframe.parse(self.timeframe).seconds
        remaining = max(0.0, next_bucket_start(latest.time, tf_seconds) - now)
        seconds = int(remaining // 1000)
        return f"{seconds // 60:02d}:{seconds % 60:02d}"

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "asset_id": self.asset_id,
            "timeframe": self.timeframe,
            "price": self.current_price,
            "candles": len(self.series),
            "sentiment": round(self.sentiment, 1),
            "countdown": self.countdown(),
            "logs": self.logs,
        }
