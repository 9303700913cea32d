"""
PocketSync – Session State
============================
Campos de sesión del motor, agrupados en una sola estructura que el
TickEngine posee y pasa por referencia al stepper y al lifecycle.

generation es un contador monotónico: cada connect()/disconnect() lo
incrementa y los pasos diferidos del handshake solo actúan si siguen
siendo de la generación vigente.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pocketsync.application.services.candle_builder import LiveCandle
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import Timeframe


@dataclass
class SessionState:
    active_asset_id: str = ""
    active_timeframe: Timeframe = Timeframe.S1
    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    current_candle: Optional[LiveCandle] = None
    message_count: int = 0
    generation: int = 0

    def is_synced_on(self, asset_id: str, timeframe: Timeframe) -> bool:
        return (
            self.status is ConnectionStatus.SYNCED
            and self.active_asset_id == asset_id
            and self.active_timeframe == timeframe
        )

    def restart(self, asset_id: str, timeframe: Timeframe) -> int:
        """Nueva sesión en estado connecting. Retorna la nueva generación."""
        self.generation += 1
        self.active_asset_id = asset_id
        self.active_timeframe = timeframe
        self.status = ConnectionStatus.CONNECTING
        self.message_count = 0
        self.current_candle = None
        return self.generation
