"""
PocketSync – WebSocket Manager (broadcast a clientes frontend)
================================================================
Gestiona conexiones WebSocket del frontend y les reenvía cada
MarketSnapshot que publica el TickEngine.

ARQUITECTURA:
  TickEngine ──publish──▸ BroadcastHub ──(queue "ws_broadcast")──▸ _broadcast_loop()
                                                                       │
                                                                       ▼
                                                    [Cliente WS 1, Cliente WS 2, ...]

NO BLOQUEA EL MOTOR:
- El hub encola con drop-oldest; el broadcast corre en su propia task.
- Si un cliente se desconecta, se elimina sin afectar a otros.
- El envío a cada cliente usa asyncio.wait_for con timeout para evitar
  que un cliente lento congele el broadcast.
"""

from __future__ import annotations

import asyncio
import json
from typing import Callable, Optional, Set

from fastapi import WebSocket, WebSocketDisconnect

from pocketsync.infrastructure.event_bus import BroadcastHub
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("ws_manager")

MARKET_EVENT = "market"
SEND_TIMEOUT_SECONDS = 5.0


class WebSocketManager:
    """Gestiona conexiones frontend y broadcast de snapshots en tiempo real."""

    def __init__(self, hub: BroadcastHub) -> None:
        self._hub = hub
        self._clients: Set[WebSocket] = set()
        self._broadcast_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    async def start(self) -> None:
        """Suscribirse al hub y lanzar el loop de broadcast."""
        queue, self._unsubscribe = self._hub.subscribe_queue("ws_broadcast")
        self._broadcast_task = asyncio.create_task(
            self._broadcast_loop(queue), name="ws-broadcast-market",
        )
        logger.info("WebSocketManager iniciado")

    async def stop(self) -> None:
        """Cancelar broadcast y cerrar todos los clientes."""
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        if self._broadcast_task:
            self._broadcast_task.cancel()
            self._broadcast_task = None

        for ws in list(self._clients):
            try:
                await ws.close()
            except Exception:
                logger.debug("Cliente WS ya cerrado al detener")
        self._clients.clear()
        logger.info("WebSocketManager detenido")

    async def connect(self, websocket: WebSocket) -> None:
        """Registrar un nuevo cliente WebSocket."""
        await websocket.accept()
        self._clients.add(websocket)
        logger.info("Cliente WS conectado. Total: %d", len(self._clients))

    def disconnect(self, websocket: WebSocket) -> None:
        """Des-registrar un cliente desconectado."""
        self._clients.discard(websocket)
        logger.info("Cliente WS desconectado. Total: %d", len(self._clients))

    async def _broadcast_loop(self, queue: asyncio.Queue) -> None:
        """Consume snapshots de la Queue y los envía a todos los clientes."""
        try:
            while True:
                snapshot = await queue.get()
                if not self._clients:
                    continue

                payload = json.dumps({
                    "type": MARKET_EVENT,
                    "data": snapshot.to_dict(),
                })

                disconnected: list[WebSocket] = []
                await asyncio.gather(
                    *(self._safe_send(ws, payload, disconnected) for ws in list(self._clients))
                )
                for ws in disconnected:
                    self._clients.discard(ws)

        except asyncio.CancelledError:
            pass  # Shutdown limpio

    async def _safe_send(
        self, ws: WebSocket, payload: str, disconnected: list[WebSocket]
    ) -> None:
        """
        Enviar payload a un cliente con timeout.
        Si falla, marcar como desconectado para limpieza.
        """
        try:
            await asyncio.wait_for(ws.send_text(payload), timeout=SEND_TIMEOUT_SECONDS)
        except (WebSocketDisconnect, asyncio.TimeoutError, RuntimeError):
            disconnected.append(ws)

    @property
    def client_count(self) -> int:
        return len(self._clients)
