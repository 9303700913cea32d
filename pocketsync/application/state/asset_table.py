"""
PocketSync – Asset State Table
================================
Estado de simulación en memoria: exactamente un AssetState por asset del
catálogo, vivo durante todo el proceso.

RACE CONDITIONS:
- Todas las mutaciones ocurren en callbacks del mismo event loop asyncio
  (paso de simulación y handshake). No hay threads.
"""

from __future__ import annotations

import random
from typing import Dict, Iterable, Optional

from pocketsync.domain.entities.asset import ASSETS, Asset
from pocketsync.domain.entities.asset_state import AssetState
from pocketsync.domain.exceptions.domain_errors import UnknownAssetError
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("asset_table")


class AssetStateTable:
    """
    Tabla asset_id → AssetState.

    Acceso: table.get("eurusd") → AssetState | None
    """

    def __init__(self, rng: random.Random, assets: Iterable[Asset] = ASSETS) -> None:
        self._states: Dict[str, AssetState] = {
            asset.id: AssetState.initial(asset, rng) for asset in assets
        }
        logger.info("AssetStateTable inicializada (%d assets)", len(self._states))

    def get(self, asset_id: str) -> Optional[AssetState]:
        """Estado de un asset, o None si no existe."""
        return self._states.get(asset_id)

    def require(self, asset_id: str) -> AssetState:
        """Estado de un asset; lanza UnknownAssetError si no existe."""
        state = self._states.get(asset_id)
        if state is None:
            raise UnknownAssetError(asset_id)
        return state

    def price_of(self, asset_id: str) -> float:
        """Precio actual; 0 para un asset desconocido."""
        state = self._states.get(asset_id)
        return state.price if state else 0.0
