"""Application ports - Interfaces to infrastructure."""
from pocketsync.application.ports.market_analyzer import IMarketAnalyzer

__all__ = [
    "IMarketAnalyzer",
]
