"""
PocketSync – Domain Entity: AssetState
========================================
Estado de simulación MUTABLE de un asset: precio, tendencia y volatilidad.

- volatility es fija por asset (más alta en pares cotizados en yenes).
- trend es la deriva aplicada en cada paso; se re-sortea estocásticamente.
- No hay piso de precio: el random walk puede, en teoría, cruzar cero.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from pocketsync.domain.entities.asset import Asset

YEN_VOLATILITY = 0.012
DEFAULT_VOLATILITY = 0.00008
INITIAL_TREND_SCALE = 0.0001


@dataclass(slots=True)
class AssetState:
    asset_id: str
    price: float
    trend: float
    volatility: float

    @classmethod
    def initial(cls, asset: Asset, rng: random.Random) -> "AssetState":
        """Estado inicial: precio base, tendencia aleatoria pequeña."""
        return cls(
            asset_id=asset.id,
            price=asset.base_price,
            trend=(rng.random() - 0.5) * INITIAL_TREND_SCALE,
            volatility=YEN_VOLATILITY if asset.is_yen_quoted else DEFAULT_VOLATILITY,
        )
