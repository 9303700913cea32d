"""
PocketSync – Market Snapshot DTO
==================================
Payload inmutable que el motor entrega a cada suscriptor.

- candle es un Candle congelado (copia), nunca la vela viva del motor.
- history solo viaja en la notificación de sincronización.
- packet_info es decorativo (log de "paquetes"), no se usa para control.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.value_objects.connection_status import ConnectionStatus


@dataclass(frozen=True, slots=True)
class MarketSnapshot:
    price: float
    candle: Optional[Candle]
    status: ConnectionStatus
    packet_info: Optional[str] = None
    history: Optional[tuple] = None
    asset_id: str = ""
    timeframe: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialización para WebSocket / frontend."""
        data: Dict[str, Any] = {
            "price": self.price,
            "candle": self.candle.to_dict() if self.candle else None,
            "status": self.status.value,
            "asset_id": self.asset_id,
            "timeframe": self.timeframe,
        }
        if self.packet_info is not None:
            data["packet_info"] = self.packet_info
        if self.history is not None:
            data["history"] = [c.to_dict() for c in self.history]
        return data
