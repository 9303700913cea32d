"""
PocketSync – Domain Layer
===========================
Núcleo puro del sistema. CERO dependencias externas.

Este módulo contiene:
- entities/: Asset, AssetState, Candle
- value_objects/: Timeframe, ConnectionStatus, AnalysisResult
- services/: Bucket Clock y backfill histórico (funciones puras)
- exceptions/: Excepciones de dominio

REGLA DE DEPENDENCIA:
Este módulo NO puede importar de application/, infrastructure/,
presentation/ ni de frameworks externos.
"""

from pocketsync.domain.entities.asset import ASSETS, ASSETS_BY_ID, Asset
from pocketsync.domain.entities.asset_state import AssetState
from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.value_objects.analysis import AnalysisResult, SignalType
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import TIMEFRAMES, Timeframe

__all__ = [
    "ASSETS",
    "ASSETS_BY_ID",
    "Asset",
    "AssetState",
    "Candle",
    "AnalysisResult",
    "SignalType",
    "ConnectionStatus",
    "TIMEFRAMES",
    "Timeframe",
]
