"""
Request Analysis Use Case.

Caso de uso: el operador pide una señal para el par activo.
Solo se ejecuta con la sesión `synced` y sin otro análisis en curso;
si no, queda bloqueado y se registra en el log del terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pocketsync.application.ports.market_analyzer import IMarketAnalyzer
from pocketsync.application.services.tick_engine import TickEngine
from pocketsync.application.state.terminal_state import TerminalState
from pocketsync.domain.entities.asset import ASSETS_BY_ID
from pocketsync.domain.value_objects.analysis import AnalysisResult
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("request_analysis")


@dataclass
class RequestAnalysisResult:
    """Resultado del caso de uso."""
    executed: bool = False
    analysis: Optional[AnalysisResult] = None
    blocked_reason: Optional[str] = None


class RequestAnalysisUseCase:

    def __init__(
        self,
        engine: TickEngine,
        terminal: TerminalState,
        analyzer: IMarketAnalyzer,
    ):
        self._engine = engine
        self._terminal = terminal
        self._analyzer = analyzer
        self._busy = False
        self._last: Optional[AnalysisResult] = None

    async def execute(self) -> RequestAnalysisResult:
        if self._busy:
            return self._blocked("ANALYSIS_IN_PROGRESS")
        if self._engine.status is not ConnectionStatus.SYNCED or not self._engine.active_asset_id:
            return self._blocked("WAITING_SYNC")

        asset = ASSETS_BY_ID[self._engine.active_asset_id]
        timeframe = self._engine.active_timeframe
        candles = self._terminal.series.to_list()

        self._busy = True
        self._terminal.log("GENERATE_SIGNAL_COMMAND_RECEIVED")
        try:
            result = await self._analyzer.analyze(asset.name, timeframe, candles)
        except Exception:
            # El puerto promete no lanzar; un adaptador defectuoso degrada a WAIT
            logger.exception("Analizador '%s' lanzó una excepción", self._analyzer.name)
            self._terminal.log("SIGNAL_ERROR: NEURAL_FAIL")
            self._last = AnalysisResult.fallback()
            return RequestAnalysisResult(executed=True, analysis=self._last)
        finally:
            self._busy = False

        self._last = result
        self._terminal.log(f"SIGNAL_GENERATED: {result.signal.value}")
        return RequestAnalysisResult(executed=True, analysis=result)

    def reset(self) -> None:
        """Olvidar la última señal (al cambiar de par)."""
        self._last = None

    def _blocked(self, reason: str) -> RequestAnalysisResult:
        self._terminal.log(f"SIGNAL_BLOCKED: {reason}")
        logger.info("Análisis bloqueado: %s", reason)
        return RequestAnalysisResult(blocked_reason=reason)

    @property
    def last_result(self) -> Optional[AnalysisResult]:
        return self._last

    @property
    def is_busy(self) -> bool:
        return self._busy
