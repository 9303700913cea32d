"""
PocketSync – API Routes (FastAPI)
===================================
Endpoints REST y WebSocket para el frontend.

Endpoints disponibles:
  WS   /ws/market          → snapshots del motor en tiempo real
  GET  /api/health         → health check
  GET  /api/assets         → catálogo de assets
  GET  /api/timeframes     → timeframes soportados
  GET  /api/status         → estado del motor + terminal
  POST /api/connect        → handshake hacia (asset, timeframe)
  POST /api/disconnect     → cerrar la sesión activa
  GET  /api/candles        → serie de velas del terminal
  POST /api/analysis       → pedir señal BUY/SELL/WAIT
  GET  /api/analysis/last  → última señal generada
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect

from pocketsync.domain.entities.asset import ASSETS
from pocketsync.domain.exceptions.domain_errors import InvalidTimeframeError, UnknownAssetError
from pocketsync.domain.value_objects.timeframe import TIMEFRAMES
from pocketsync.presentation.api.schemas import (
    AnalysisResponse,
    CandlesResponse,
    ConnectRequest,
    ConnectResponse,
    HealthResponse,
)
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_engine = None
_terminal = None
_ws_manager = None
_analysis = None


def init_routes(engine, terminal, ws_manager, analysis_usecase) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _engine, _terminal, _ws_manager, _analysis
    _engine = engine
    _terminal = terminal
    _ws_manager = ws_manager
    _analysis = analysis_usecase


# ─── WebSocket endpoint para streaming a frontend ─────────────────────

@router.websocket("/ws/market")
async def market_stream(websocket: WebSocket) -> None:
    """
    El frontend se conecta aquí para recibir cada snapshot del motor.
    El broadcast lo maneja WebSocketManager; este handler solo gestiona
    el ciclo de vida de la conexión.
    """
    if _ws_manager is None:
        await websocket.close(code=1011, reason="Server not ready")
        return

    await _ws_manager.connect(websocket)
    try:
        while True:
            try:
                data = await websocket.receive_text()
                logger.debug("Mensaje de cliente WS: %s", data[:100])
            except WebSocketDisconnect:
                break
    finally:
        _ws_manager.disconnect(websocket)


# ─── REST endpoints ────────────────────────────────────────────────────

@router.get("/api/health", response_model=HealthResponse)
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {"status": "ok", "service": "pocketsync"}


@router.get("/api/assets")
async def list_assets() -> dict:
    return {"assets": [a.to_dict() for a in ASSETS]}


@router.get("/api/timeframes")
async def list_timeframes() -> dict:
    return {
        "timeframes": [{"id": tf.value, "seconds": tf.seconds} for tf in TIMEFRAMES],
    }


@router.get("/api/status")
async def system_status() -> dict:
    """Estado completo del sistema."""
    return {
        "engine": _engine.get_status() if _engine else None,
        "terminal": _terminal.to_dict() if _terminal else None,
        "ws_clients": _ws_manager.client_count if _ws_manager else 0,
    }


@router.post("/api/connect", response_model=ConnectResponse)
async def connect(body: ConnectRequest) -> dict:
    """Iniciar (o reiniciar) el handshake hacia un asset/timeframe."""
    try:
        started = _engine.connect(body.asset_id, body.timeframe)
    except UnknownAssetError as exc:
        raise HTTPException(status_code=404, detail=exc.to_dict())
    except InvalidTimeframeError as exc:
        raise HTTPException(status_code=422, detail=exc.to_dict())

    if started:
        _terminal.reset_log(f"INITIALIZING_{body.asset_id.upper()}_LINK")
        _analysis.reset()
    return {
        "started": started,
        "status": _engine.status.value,
        "asset_id": _engine.active_asset_id,
        "timeframe": _engine.active_timeframe.value,
        "generation": _engine.generation,
    }


@router.post("/api/disconnect")
async def disconnect() -> dict:
    _engine.disconnect()
    return {"status": _engine.status.value}


@router.get("/api/candles", response_model=CandlesResponse)
async def get_candles(count: int = Query(default=100, ge=1, le=500)) -> dict:
    """Últimas N velas retenidas por el terminal."""
    candles = _terminal.series.last(count)
    return {
        "asset_id": _terminal.asset_id,
        "timeframe": _terminal.timeframe,
        "count": len(candles),
        "candles": [c.to_dict() for c in candles],
    }


@router.post("/api/analysis", response_model=AnalysisResponse)
async def request_analysis() -> dict:
    """Pedir una señal para la próxima vela (409 si la sesión no está lista)."""
    result = await _analysis.execute()
    if not result.executed:
        raise HTTPException(
            status_code=409,
            detail={"error": "SIGNAL_BLOCKED", "message": result.blocked_reason},
        )
    return {
        "executed": True,
        "analysis": result.analysis.to_dict(),
        "blocked_reason": None,
    }


@router.get("/api/analysis/last")
async def last_analysis() -> dict:
    last = _analysis.last_result if _analysis else None
    return {"analysis": last.to_dict() if last else None}
