"""
PocketSync – Broadcast Hub (fan-out de snapshots)
===================================================
Bus interno que desacopla al TickEngine (productor) de sus observadores.

Dos tipos de suscriptor:
  ┌────────────┐            ┌───────────────┐──▸ callback 1 (TerminalState)
  │ TickEngine │──publish──▸│ BroadcastHub  │──▸ callback N ...
  └────────────┘            │   (fan-out)   │──▸ Queue "ws_broadcast" (async)
                            └───────────────┘

CALLBACKS:
- Se invocan de forma síncrona, en el contexto del timer que disparó.
- Sin garantía de orden entre suscriptores.
- Si un callback lanza, se loguea y se continúa con los demás: un
  suscriptor defectuoso nunca afecta a otros ni al motor.

COLAS:
- Cada consumidor async tiene su propia asyncio.Queue acotada.
- Política drop-oldest: con cadencia de 100 ms un consumidor lento solo
  pierde los snapshots más viejos y el productor NUNCA se bloquea.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional, Tuple

from pocketsync.shared.logging.logger import get_logger

logger = get_logger("event_bus")

Subscriber = Callable[[Any], None]
Unsubscribe = Callable[[], None]


class BroadcastHub:
    """Fan-out síncrono a callbacks + colas acotadas drop-oldest."""

    def __init__(self, max_queue_size: int = 256) -> None:
        self._max_queue_size = max_queue_size
        # token → callback (el token permite suscribir el mismo callable 2 veces)
        self._callbacks: Dict[object, Subscriber] = {}
        # token → (queue, nombre_consumidor)
        self._queues: Dict[object, Tuple[asyncio.Queue, str]] = {}
        self._dropped: int = 0

    def subscribe(self, callback: Subscriber) -> Unsubscribe:
        """Registrar un callback. Retorna la función para desuscribirlo."""
        token = object()
        self._callbacks[token] = callback

        def unsubscribe() -> None:
            self._callbacks.pop(token, None)

        return unsubscribe

    def subscribe_queue(
        self, consumer_name: str, maxsize: Optional[int] = None,
    ) -> Tuple[asyncio.Queue, Unsubscribe]:
        """
        Registrar un consumidor async.
        Retorna su Queue exclusiva y la función para desuscribirlo.
        """
        token = object()
        queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize or self._max_queue_size)
        self._queues[token] = (queue, consumer_name)
        logger.info(
            "Consumidor '%s' suscrito (max_queue=%d)", consumer_name, queue.maxsize,
        )

        def unsubscribe() -> None:
            if self._queues.pop(token, None) is not None:
                logger.info("Consumidor '%s' desuscrito", consumer_name)

        return queue, unsubscribe

    def publish(self, data: Any) -> None:
        """Entregar data a todos los suscriptores actuales."""
        for callback in list(self._callbacks.values()):
            try:
                callback(data)
            except Exception:
                logger.exception("Suscriptor %r falló; se continúa con el resto", callback)

        for queue, consumer_name in list(self._queues.values()):
            if queue.full():
                # Drop-oldest: sacar el snapshot más viejo para hacer espacio
                try:
                    queue.get_nowait()
                    self._dropped += 1
                    logger.debug(
                        "Cola llena para '%s' – snapshot antiguo descartado", consumer_name,
                    )
                except asyncio.QueueEmpty:
                    pass
            try:
                queue.put_nowait(data)
            except asyncio.QueueFull:
                logger.error("No se pudo encolar snapshot para '%s'", consumer_name)

    def unsubscribe_all(self) -> None:
        """Desuscribir todo (cleanup al shutdown)."""
        self._callbacks.clear()
        self._queues.clear()
        logger.info("Todos los suscriptores eliminados (shutdown)")

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks) + len(self._queues)

    @property
    def dropped_count(self) -> int:
        return self._dropped
