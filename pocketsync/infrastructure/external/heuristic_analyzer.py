"""
PocketSync – Heuristic Analyzer
=================================
Analizador local y determinista: mismas entradas → misma señal.
Se usa cuando no hay API key de Gemini y como doble en tests.

REGLAS (sobre las últimas velas):
  - Momentum: 3 velas alcistas seguidas → BUY, 3 bajistas → SELL.
  - Fluxo de Vela: cuerpo de la última > 70% del rango → +confianza.
  - Rejeição de Pavio: mecha contraria > 2x el cuerpo → anula el momentum.
  - Sin momentum claro → WAIT.
"""

from __future__ import annotations

from typing import List, Sequence

from pocketsync.application.ports.market_analyzer import IMarketAnalyzer
from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.value_objects.analysis import AnalysisResult, SignalType
from pocketsync.domain.value_objects.timeframe import Timeframe
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("heuristic_analyzer")

MOMENTUM_CANDLES = 3
FLOW_BODY_RATIO = 0.7
WICK_REJECTION_MULT = 2.0
BASE_CONFIDENCE = 60.0
FLOW_BONUS = 15.0


def _body(c: Candle) -> float:
    return abs(c.close - c.open)


def _upper_wick(c: Candle) -> float:
    return c.high - max(c.open, c.close)


def _lower_wick(c: Candle) -> float:
    return min(c.open, c.close) - c.low


class HeuristicAnalyzer(IMarketAnalyzer):

    @property
    def name(self) -> str:
        return "heuristic"

    async def analyze(
        self,
        asset_name: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
    ) -> AnalysisResult:
        if len(candles) < MOMENTUM_CANDLES:
            return AnalysisResult(
                signal=SignalType.WAIT,
                confidence=0,
                reason="Histórico insuficiente para análise.",
            )

        last = list(candles[-MOMENTUM_CANDLES:])
        latest = last[-1]
        checked: List[str] = ["MHI", "Rejeição de Pavio", "Fluxo de Vela"]

        if all(c.is_bullish for c in last):
            signal = SignalType.BUY
            rejected = _upper_wick(latest) > WICK_REJECTION_MULT * _body(latest)
        elif all(c.is_bearish for c in last):
            signal = SignalType.SELL
            rejected = _lower_wick(latest) > WICK_REJECTION_MULT * _body(latest)
        else:
            return AnalysisResult(
                signal=SignalType.WAIT,
                confidence=0,
                reason="Mercado lateral (Ranging).",
                strategies_checked=checked,
            )

        if rejected:
            return AnalysisResult(
                signal=SignalType.WAIT,
                confidence=25,
                reason="Rejeição de Pavio contra o momentum.",
                strategies_checked=checked,
            )

        confidence = BASE_CONFIDENCE
        reason = "Momentum de 3 velas"
        candle_range = latest.high - latest.low
        if candle_range > 0 and _body(latest) / candle_range > FLOW_BODY_RATIO:
            confidence += FLOW_BONUS
            reason += " + Fluxo de Vela"

        logger.debug("Heurística [%s %s] → %s (%.0f)", asset_name, timeframe.value, signal.value, confidence)
        return AnalysisResult(
            signal=signal,
            confidence=confidence,
            reason=reason,
            strategies_checked=checked,
        )
