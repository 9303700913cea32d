"""
PocketSync – Tick Engine
==========================
Motor sintético de mercado: instancia explícita, creada por el punto de
entrada de la aplicación, con ciclo de vida start()/stop().

COMPONENTES:
  AssetStateTable     → precio/tendencia/volatilidad por asset
  SessionState        → asset/timeframe activos, status, vela viva, contador
  ConnectionLifecycle → handshake connecting → authorizing → synced
  LiveStepper         → paso de simulación cada 100 ms
  BroadcastHub        → fan-out de MarketSnapshot a los suscriptores

FLUJO:
  connect(asset, tf) ─▸ connecting ─▸ notify("WSS_HANDSHAKE_INIT")
        600ms         ─▸ authorizing ─▸ notify("AUTH_TOKEN_VALIDATED")
        800ms         ─▸ synced ─▸ backfill(60) + anclar vela
                                ─▸ notify("SUBSCRIBE_SUCCESS_<ASSET>", history)
  cada 100ms (synced) ─▸ LiveStepper.step() ─▸ notify()

ORDEN:
  Dentro de un tick: precio → vela → broadcast, secuencial. El loop de
  simulación y el handshake corren en el mismo event loop asyncio, así que
  se intercalan pero nunca se ejecutan en paralelo.
"""

from __future__ import annotations

import asyncio
import random
import time
from typing import Callable, List, Optional

from pocketsync.application.dto.market_snapshot import MarketSnapshot
from pocketsync.application.services.candle_builder import LiveCandle
from pocketsync.application.services.connection_lifecycle import ConnectionLifecycle
from pocketsync.application.services.live_stepper import LiveStepper
from pocketsync.application.state.asset_table import AssetStateTable
from pocketsync.application.state.session_state import SessionState
from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.services.history_generator import generate_history
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import Timeframe
from pocketsync.infrastructure.event_bus import BroadcastHub, Unsubscribe
from pocketsync.shared.config.settings import Settings, settings as default_settings
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("tick_engine")

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    return time.time() * 1000


class TickEngine:
    """
    Ciclo de vida:
      1. start()   → lanza la task de simulación (idempotente)
      2. connect() → handshake simulado hacia (asset, timeframe)
      3. stop()    → cancela simulación y handshake pendiente
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        hub: Optional[BroadcastHub] = None,
    ) -> None:
        self._settings = config or default_settings
        self._clock = clock or wall_clock_ms
        self._rng = rng or random.Random()
        self._hub = hub or BroadcastHub(self._settings.subscriber_queue_size)

        self._assets = AssetStateTable(self._rng)
        self._session = SessionState()
        self._stepper = LiveStepper(self._rng, self._settings.trend_change_probability)
        self._lifecycle = ConnectionLifecycle(
            self._session,
            on_authorizing=self._on_authorizing,
            on_synced=self._on_synced,
            connect_delay_ms=self._settings.handshake_connect_delay_ms,
            auth_delay_ms=self._settings.handshake_auth_delay_ms,
        )

        self._running = False
        self._sim_task: Optional[asyncio.Task] = None

    # ──────────────────────── Lifecycle ──────────────────────────────────

    async def start(self) -> None:
        """Iniciar el loop de simulación. Idempotente."""
        if self._running:
            logger.warning("TickEngine ya está corriendo, ignorando start()")
            return
        self._running = True
        self._sim_task = asyncio.create_task(self._simulation_loop(), name="tick-engine-sim")
        logger.info("TickEngine iniciado (tick=%dms)", self._settings.tick_interval_ms)

    async def stop(self) -> None:
        """Shutdown limpio: cancelar simulación y handshake en vuelo."""
        self._running = False
        self.disconnect()
        if self._sim_task and not self._sim_task.done():
            self._sim_task.cancel()
            try:
                await self._sim_task
            except asyncio.CancelledError:
                pass
        self._sim_task = None
        logger.info("TickEngine detenido")

    async def _simulation_loop(self) -> None:
        interval = self._settings.tick_interval_ms / 1000
        while self._running:
            try:
                self.step()
            except Exception:
                logger.exception("Error en paso de simulación")
            await asyncio.sleep(interval)

    # ──────────────────────── API pública ────────────────────────────────

    def connect(self, asset_id: str, timeframe: Timeframe | str) -> bool:
        """
        Conectar (o reconectar) al par asset/timeframe.

        Retorna False si ya estaba synced en el mismo par (no-op).
        Lanza UnknownAssetError / InvalidTimeframeError sin tocar la sesión.
        Requiere un event loop activo (el handshake corre como task).
        """
        tf = Timeframe.parse(timeframe)
        if self._session.is_synced_on(asset_id, tf):
            return False
        self._assets.require(asset_id)
        # Sin loop activo falla aquí, antes de tocar la sesión
        asyncio.get_running_loop()

        generation = self._lifecycle.begin(asset_id, tf)
        self.notify("WSS_HANDSHAKE_INIT")
        self._lifecycle.run(generation)
        return True

    def disconnect(self) -> None:
        """Cerrar la sesión activa; los suscriptores deben limpiar sus series."""
        if self._session.status is ConnectionStatus.DISCONNECTED:
            return
        self._lifecycle.close()
        self.notify("WSS_CLOSED")

    def subscribe(self, callback: Callable[[MarketSnapshot], None]) -> Unsubscribe:
        """Registrar un observador. Retorna la función para desuscribirlo."""
        return self._hub.subscribe(callback)

    def step(self, now_ms: Optional[float] = None) -> bool:
        """Un tick de simulación. Retorna True si hubo broadcast."""
        now = self._clock() if now_ms is None else now_ms
        state = self._assets.get(self._session.active_asset_id)
        if not self._stepper.step(self._session, state, now):
            return False
        self.notify()
        return True

    def notify(self, packet_info: Optional[str] = None, history: Optional[List[Candle]] = None) -> None:
        """Entregar un snapshot a todos los suscriptores actuales."""
        session = self._session
        if packet_info is None and session.message_count % self._settings.stream_heartbeat_every == 0:
            packet_info = f"STREAM_DATA_{session.message_count}"
        self._hub.publish(self._build_snapshot(packet_info, history))

    def snapshot(self) -> MarketSnapshot:
        """Estado actual sin publicarlo."""
        return self._build_snapshot(None, None)

    # ──────────────────────── Callbacks del handshake ────────────────────

    def _on_authorizing(self) -> None:
        self.notify("AUTH_TOKEN_VALIDATED")

    def _on_synced(self) -> None:
        session = self._session
        now = self._clock()
        state = self._assets.get(session.active_asset_id)
        history = generate_history(
            state,
            session.active_timeframe.seconds,
            now,
            self._rng,
            count=self._settings.history_candles,
        )
        if state is not None:
            session.current_candle = LiveCandle.anchor(
                now, session.active_timeframe.seconds, state.price,
            )
        logger.info(
            "Backfill generado [%s/%s]: %d velas",
            session.active_asset_id,
            session.active_timeframe.value,
            len(history),
        )
        self.notify(f"SUBSCRIBE_SUCCESS_{session.active_asset_id.upper()}", history)

    # ──────────────────────── Internos ──────────────────────────────────

    def _build_snapshot(
        self, packet_info: Optional[str], history: Optional[List[Candle]],
    ) -> MarketSnapshot:
        session = self._session
        candle = session.current_candle
        return MarketSnapshot(
            price=self._assets.price_of(session.active_asset_id),
            candle=candle.freeze() if candle else None,
            status=session.status,
            packet_info=packet_info,
            history=tuple(history) if history is not None else None,
            asset_id=session.active_asset_id,
            timeframe=session.active_timeframe.value,
        )

    # ──────────────────────── Propiedades ───────────────────────────────

    @property
    def status(self) -> ConnectionStatus:
        return self._session.status

    @property
    def active_asset_id(self) -> str:
        return self._session.active_asset_id

    @property
    def active_timeframe(self) -> Timeframe:
        return self._session.active_timeframe

    @property
    def current_price(self) -> float:
        return self._assets.price_of(self._session.active_asset_id)

    @property
    def message_count(self) -> int:
        return self._session.message_count

    @property
    def generation(self) -> int:
        return self._session.generation

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def hub(self) -> BroadcastHub:
        return self._hub

    @property
    def assets(self) -> AssetStateTable:
        return self._assets

    def get_status(self) -> dict:
        """Estado del motor para API / monitoreo."""
        return {
            "running": self._running,
            "status": self._session.status.value,
            "asset_id": self._session.active_asset_id,
            "timeframe": self._session.active_timeframe.value,
            "price": self.current_price,
            "message_count": self._session.message_count,
            "generation": self._session.generation,
            "subscribers": self._hub.subscriber_count,
        }
