"""
PocketSync – Historical Backfill
==================================
Genera N velas sintéticas pasadas al sincronizar un asset.

ALGORITMO:
  1. El bucket más reciente generado es el INMEDIATAMENTE anterior al de now.
  2. Se recorre hacia atrás en pasos de T segundos; las velas se devuelven
     de la más antigua a la más reciente, contiguas (espaciado T*1000 ms).
  3. open = close anterior (precio del asset para la más antigua)
     close = open + U(-0.5, 0.5) * vol * 5
     high  = max(open, close) + U(0, 1) * vol
     low   = min(open, close) - U(0, 1) * vol
     volume = U(0, 1) * 500
  4. El precio del asset queda en el close de la última vela, así la
     simulación en vivo continúa sin salto respecto del histórico.
"""

from __future__ import annotations

import random
from typing import List, Optional

from pocketsync.domain.entities.asset_state import AssetState
from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.services.bucket_clock import bucket_start

HISTORY_CANDLES = 60
BODY_VOLATILITY_MULT = 5
MAX_HISTORY_VOLUME = 500


def generate_history(
    state: Optional[AssetState],
    timeframe_seconds: int,
    now_ms: float,
    rng: random.Random,
    count: int = HISTORY_CANDLES,
) -> List[Candle]:
    """
    Generar `count` velas históricas terminando en el bucket previo a now.

    Un asset desconocido (state=None) produce una lista vacía, sin error.
    """
    if state is None or count <= 0:
        return []

    span = timeframe_seconds * 1000
    current_bucket = bucket_start(now_ms, timeframe_seconds)
    vol = state.volatility

    history: List[Candle] = []
    price = state.price
    for i in range(count, 0, -1):
        open_ = price
        close = open_ + (rng.random() - 0.5) * vol * BODY_VOLATILITY_MULT
        high = max(open_, close) + rng.random() * vol
        low = min(open_, close) - rng.random() * vol
        history.append(
            Candle(
                time=current_bucket - i * span,
                open=open_,
                high=high,
                low=low,
                close=close,
                volume=rng.random() * MAX_HISTORY_VOLUME,
            )
        )
        price = close

    state.price = price
    return history
