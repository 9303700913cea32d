"""
PocketSync – Connection Lifecycle (handshake simulado)
========================================================
Máquina de estados del "WebSocket" simulado:

    disconnected ──connect()──▸ connecting ──600ms──▸ authorizing ──800ms──▸ synced

GENERACIÓN:
- Cada begin()/close() incrementa session.generation.
- El handshake corre como asyncio.Task etiquetada con la generación con la
  que se lanzó; antes de cada transición diferida comprueba que sigue
  vigente. Un connect() re-entrante cancela la task anterior y, aunque un
  paso tardío llegara a ejecutarse, no puede pisar la sesión nueva.

`error` nunca se alcanza: en esta simulación connect() siempre termina
en `synced`.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from pocketsync.application.state.session_state import SessionState
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import Timeframe
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("connection_lifecycle")


class ConnectionLifecycle:
    """
    Ciclo de vida:
      1. begin()      → connecting (síncrono, retorna la generación)
      2. run()        → task: authorizing → synced con callbacks
      3. close()      → disconnected, cancela el handshake pendiente
    """

    def __init__(
        self,
        session: SessionState,
        on_authorizing: Callable[[], None],
        on_synced: Callable[[], None],
        connect_delay_ms: int = 600,
        auth_delay_ms: int = 800,
    ) -> None:
        self._session = session
        self._on_authorizing = on_authorizing
        self._on_synced = on_synced
        self._connect_delay = connect_delay_ms / 1000
        self._auth_delay = auth_delay_ms / 1000
        self._handshake_task: Optional[asyncio.Task] = None

    # ──────────────────────── Transiciones ──────────────────────────────

    def begin(self, asset_id: str, timeframe: Timeframe) -> int:
        """Abortar el handshake en vuelo y pasar a connecting."""
        self._cancel_pending()
        generation = self._session.restart(asset_id, timeframe)
        logger.info(
            "Handshake iniciado [%s/%s] gen=%d", asset_id, timeframe.value, generation,
        )
        return generation

    def run(self, generation: int) -> asyncio.Task:
        """Lanzar el resto del handshake en background (requiere loop activo)."""
        self._handshake_task = asyncio.create_task(
            self._handshake(generation), name=f"handshake-gen-{generation}",
        )
        return self._handshake_task

    def authorize(self, generation: int) -> bool:
        """connecting → authorizing si la generación sigue vigente."""
        if not self._is_current(generation, ConnectionStatus.CONNECTING):
            return False
        self._session.status = ConnectionStatus.AUTHORIZING
        logger.info("Sesión autorizada gen=%d", generation)
        self._on_authorizing()
        return True

    def synchronize(self, generation: int) -> bool:
        """authorizing → synced si la generación sigue vigente."""
        if not self._is_current(generation, ConnectionStatus.AUTHORIZING):
            return False
        self._session.status = ConnectionStatus.SYNCED
        logger.info(
            "Sesión sincronizada [%s/%s] gen=%d",
            self._session.active_asset_id,
            self._session.active_timeframe.value,
            generation,
        )
        self._on_synced()
        return True

    def close(self) -> int:
        """Cualquier estado → disconnected."""
        self._cancel_pending()
        self._session.generation += 1
        self._session.status = ConnectionStatus.DISCONNECTED
        self._session.current_candle = None
        logger.info("Sesión cerrada gen=%d", self._session.generation)
        return self._session.generation

    # ──────────────────────── Internos ──────────────────────────────────

    async def _handshake(self, generation: int) -> None:
        await asyncio.sleep(self._connect_delay)
        if not self.authorize(generation):
            return
        await asyncio.sleep(self._auth_delay)
        self.synchronize(generation)

    def _is_current(self, generation: int, expected: ConnectionStatus) -> bool:
        if generation != self._session.generation:
            logger.debug(
                "Paso de handshake obsoleto ignorado (gen=%d, vigente=%d)",
                generation,
                self._session.generation,
            )
            return False
        return self._session.status is expected

    def _cancel_pending(self) -> None:
        task = self._handshake_task
        if task is not None and not task.done():
            task.cancel()
        self._handshake_task = None

    @property
    def handshake_pending(self) -> bool:
        return self._handshake_task is not None and not self._handshake_task.done()
