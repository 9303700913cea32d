"""
PocketSync – Application Port: Market Analyzer
================================================
Interfaz para el análisis de mercado que sugiere BUY / SELL / WAIT.

Los use cases solicitan análisis; la infraestructura decide QUÉ backend
usar (Gemini, heurística local, stub de tests).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.value_objects.analysis import AnalysisResult
from pocketsync.domain.value_objects.timeframe import Timeframe


class IMarketAnalyzer(ABC):
    """
    IMPLEMENTACIONES:
    - GeminiAnalyzer (producción, requiere API key)
    - HeuristicAnalyzer (local, determinista)
    """

    @abstractmethod
    async def analyze(
        self,
        asset_name: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
    ) -> AnalysisResult:
        """
        Analiza la serie y sugiere la operación para la próxima vela.

        Contrato: NUNCA lanza. Ante cualquier fallo retorna
        AnalysisResult.fallback() (WAIT, confidence 0).
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass
