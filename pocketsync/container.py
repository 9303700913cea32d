"""
Dependency Injection Container.

Único lugar donde se crean las dependencias concretas: motor de ticks,
estado del terminal, analizador y caso de uso de análisis.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Optional

from pocketsync.application.ports.market_analyzer import IMarketAnalyzer
from pocketsync.application.services.tick_engine import TickEngine
from pocketsync.application.state.terminal_state import TerminalState
from pocketsync.application.use_cases.request_analysis_usecase import RequestAnalysisUseCase
from pocketsync.infrastructure.event_bus import BroadcastHub
from pocketsync.presentation.websocket.websocket_manager import WebSocketManager
from pocketsync.shared.config.settings import Settings


@dataclass
class Container:
    """
    Contenedor de Inyección de Dependencias.

    Las instancias se crean perezosamente (singleton por contenedor).
    El TerminalState queda suscrito al motor en cuanto se crea.
    """

    settings: Settings = field(default_factory=Settings)
    rng: Optional[random.Random] = None

    _hub: Optional[BroadcastHub] = None
    _engine: Optional[TickEngine] = None
    _terminal: Optional[TerminalState] = None
    _analyzer: Optional[IMarketAnalyzer] = None
    _analysis_usecase: Optional[RequestAnalysisUseCase] = None
    _ws_manager: Optional[WebSocketManager] = None

    # ==================== Infraestructura ====================

    @property
    def hub(self) -> BroadcastHub:
        if self._hub is None:
            self._hub = BroadcastHub(self.settings.subscriber_queue_size)
        return self._hub

    @property
    def analyzer(self) -> IMarketAnalyzer:
        """Gemini si hay API key, heurística local si no."""
        if self._analyzer is None:
            if self.settings.gemini_api_key:
                from pocketsync.infrastructure.external.gemini_analyzer import GeminiAnalyzer
                self._analyzer = GeminiAnalyzer(self.settings.gemini_api_key, self.settings)
            else:
                from pocketsync.infrastructure.external.heuristic_analyzer import HeuristicAnalyzer
                self._analyzer = HeuristicAnalyzer()
        return self._analyzer

    # ==================== Motor / estado ====================

    @property
    def engine(self) -> TickEngine:
        if self._engine is None:
            self._engine = TickEngine(self.settings, rng=self.rng, hub=self.hub)
        return self._engine

    @property
    def terminal(self) -> TerminalState:
        if self._terminal is None:
            self._terminal = TerminalState(self.settings.max_series_candles)
            self.engine.subscribe(self._terminal.apply)
        return self._terminal

    # ==================== Use Cases / Presentación ====================

    @property
    def analysis_usecase(self) -> RequestAnalysisUseCase:
        if self._analysis_usecase is None:
            self._analysis_usecase = RequestAnalysisUseCase(
                engine=self.engine,
                terminal=self.terminal,
                analyzer=self.analyzer,
            )
        return self._analysis_usecase

    @property
    def ws_manager(self) -> WebSocketManager:
        if self._ws_manager is None:
            self._ws_manager = WebSocketManager(self.hub)
        return self._ws_manager

    # ==================== Lifecycle ====================

    def override(self, name: str, instance: Any) -> None:
        """
        Override una dependencia (útil para tests con dobles).

        Args:
            name: Nombre de la dependencia (ej: 'analyzer')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """Instancia global del contenedor (se crea si no existe)."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def init_container(settings: Optional[Settings] = None, **overrides: Any) -> Container:
    """
    Inicializa el contenedor global con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, usa valores por defecto.
        **overrides: Dependencias a reemplazar (ej: analyzer=stub)
    """
    global _container
    _container = Container(settings=settings or Settings())
    for name, instance in overrides.items():
        _container.override(name, instance)
    return _container
