"""
PocketSync – Domain Entity: Asset
===================================
Catálogo de pares OTC negociables y su precio base de simulación.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True, slots=True)
class Asset:
    id: str           # e.g. "eurusd"
    name: str         # e.g. "EUR/USD OTC"
    symbol: str       # e.g. "€/$"
    base_price: float

    @property
    def is_yen_quoted(self) -> bool:
        return "jpy" in self.id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "base_price": self.base_price,
        }


ASSETS: tuple[Asset, ...] = (
    Asset("eurusd", "EUR/USD OTC", "€/$", 1.08542),
    Asset("gbpusd", "GBP/USD OTC", "£/$", 1.26430),
    Asset("usdjpy", "USD/JPY OTC", "$/¥", 149.520),
    Asset("audusd", "AUD/USD OTC", "A$/$", 0.65340),
    Asset("usdchf", "USD/CHF OTC", "$/Fr", 0.88420),
    Asset("eurgbp", "EUR/GBP OTC", "€/£", 0.85430),
    Asset("eurjpy", "EUR/JPY OTC", "€/¥", 162.340),
    Asset("gbpjpy", "GBP/JPY OTC", "£/¥", 189.120),
)

ASSETS_BY_ID: Dict[str, Asset] = {asset.id: asset for asset in ASSETS}
