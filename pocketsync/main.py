"""
PocketSync – Main Application Entry Point
============================================
Orquesta el motor sintético de mercado y su superficie HTTP/WebSocket.

ARQUITECTURA DE ARRANQUE:
  1. Configurar logging
  2. Crear instancias desde el contenedor (Hub, TickEngine, Terminal, Analyzer)
  3. FastAPI lifespan startup:
     a. Iniciar WebSocketManager (broadcast a frontend)
     b. Iniciar TickEngine (loop de simulación 100 ms)
     c. Conectar al asset/timeframe por defecto
  4. FastAPI lifespan shutdown:
     a. Detener todo en orden inverso

FLUJO DE DATOS:
  TickEngine ──MarketSnapshot──▸ BroadcastHub ──▸ TerminalState (serie de velas)
                                              └─▸ WebSocketManager ──▸ Frontend
  POST /api/analysis ──▸ RequestAnalysisUseCase ──▸ IMarketAnalyzer (Gemini | heurística)

  uvicorn pocketsync.main:app --reload --host 0.0.0.0 --port 8890
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pocketsync import __version__
from pocketsync.container import Container, init_container
from pocketsync.presentation.api.routes import init_routes, router
from pocketsync.shared.logging.logger import get_logger, setup_logging

logger = get_logger("main")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Construir la app FastAPI sobre un contenedor (el global si es None)."""
    container = container or init_container()
    cfg = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("  PocketSync - OTC Terminal v%s", __version__)
        logger.info("  Tick: %dms | Handshake: %dms + %dms",
                    cfg.tick_interval_ms,
                    cfg.handshake_connect_delay_ms,
                    cfg.handshake_auth_delay_ms)
        logger.info("  Histórico: %d velas | Serie máx: %d velas",
                    cfg.history_candles, cfg.max_series_candles)
        logger.info("  Analizador: %s", container.analyzer.name)
        logger.info("=" * 60)

        init_routes(
            container.engine, container.terminal,
            container.ws_manager, container.analysis_usecase,
        )

        await container.ws_manager.start()
        await container.engine.start()
        if cfg.default_asset:
            container.engine.connect(cfg.default_asset, cfg.default_timeframe)

        logger.info("✓ Todos los componentes iniciados correctamente")

        yield  # ← La app está corriendo aquí

        logger.info("Iniciando shutdown...")
        await container.engine.stop()
        await container.ws_manager.stop()
        container.hub.unsubscribe_all()
        logger.info("✓ Shutdown completo")

    app = FastAPI(
        title="PocketSync",
        description="Terminal OTC simulado: motor sintético de velas, handshake y señales",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS para frontend local
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


setup_logging()
app = create_app()
