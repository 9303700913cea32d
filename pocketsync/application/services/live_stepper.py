"""
PocketSync – Live Stepper
===========================
Un paso de simulación: random walk del precio + mutación de la vela viva.

ALGORITMO (por tick de 100 ms, independiente del timeframe):
  1. price += U(-0.5, 0.5) * vol + trend
  2. Con probabilidad p (0.02): trend = U(-0.5, 0.5) * vol * 0.4
  3. candle_start = bucket_start(now, T)
  4. Sin vela viva o bucket distinto → anclar vela plana nueva.
     Los buckets saltados NUNCA se rellenan: solo se abre el más reciente.
  5. Mismo bucket → high/low/close y volume += U(0, 1) * 30
  6. message_count += 1

El periodo fijo hace visible el movimiento intra-vela incluso en 5m y
detecta el cambio de bucket a lo sumo un tick después de ocurrido.

Sin piso de precio: el walk puede cruzar cero en corridas muy largas.
"""

from __future__ import annotations

import random
from typing import Optional

from pocketsync.application.services.candle_builder import LiveCandle
from pocketsync.application.state.session_state import SessionState
from pocketsync.domain.entities.asset_state import AssetState
from pocketsync.domain.services.bucket_clock import bucket_start
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("live_stepper")

TREND_VOLATILITY_MULT = 0.4
MAX_TICK_VOLUME = 30


class LiveStepper:
    """
    Aplica un paso de simulación sobre la sesión activa.

    Uso:
        stepper = LiveStepper(rng)
        if stepper.step(session, state, now_ms):
            # notificar a suscriptores
    """

    def __init__(self, rng: random.Random, trend_change_probability: float = 0.02) -> None:
        self._rng = rng
        self._trend_change_probability = trend_change_probability

    def step(
        self,
        session: SessionState,
        state: Optional[AssetState],
        now_ms: float,
    ) -> bool:
        """Ejecutar un paso. Retorna False (no-op) si la sesión no está synced."""
        if session.status is not ConnectionStatus.SYNCED or not session.active_asset_id:
            return False
        if state is None:
            return False

        rng = self._rng
        vol = state.volatility

        state.price += (rng.random() - 0.5) * vol + state.trend

        if rng.random() < self._trend_change_probability:
            state.trend = (rng.random() - 0.5) * (vol * TREND_VOLATILITY_MULT)
            logger.debug("Cambio de régimen [%s] trend=%.8f", state.asset_id, state.trend)

        timeframe_seconds = session.active_timeframe.seconds
        candle_start = bucket_start(now_ms, timeframe_seconds)
        candle = session.current_candle

        if candle is None or candle.time != candle_start:
            session.current_candle = LiveCandle.anchor(now_ms, timeframe_seconds, state.price)
        else:
            candle.update(state.price, rng.random() * MAX_TICK_VOLUME)

        session.message_count += 1
        return True
