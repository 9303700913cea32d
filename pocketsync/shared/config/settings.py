"""
PocketSync – Settings (Pydantic BaseSettings)
=============================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.

Todas las variables aceptan prefijo POCKETSYNC_ (e.g. POCKETSYNC_TICK_INTERVAL_MS).
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── Motor de simulación ────────────────────────────────────────────
    tick_interval_ms: int = Field(
        default=100, gt=0, description="Periodo fijo del paso de simulación (ms)",
    )
    trend_change_probability: float = Field(
        default=0.02, ge=0.0, le=1.0,
        description="Probabilidad por tick de re-sortear la tendencia",
    )
    stream_heartbeat_every: int = Field(
        default=20, gt=0, description="Cada N pasos se emite un packet STREAM_DATA_<n>",
    )

    # ─── Handshake simulado ─────────────────────────────────────────────
    handshake_connect_delay_ms: int = Field(
        default=600, ge=0, description="connecting → authorizing (ms)",
    )
    handshake_auth_delay_ms: int = Field(
        default=800, ge=0, description="authorizing → synced (ms)",
    )

    # ─── Velas ──────────────────────────────────────────────────────────
    history_candles: int = Field(
        default=60, gt=0, description="Velas históricas generadas al sincronizar",
    )
    max_series_candles: int = Field(
        default=100, gt=0, description="Máximo de velas retenidas por el consumidor",
    )

    # ─── Sesión por defecto ─────────────────────────────────────────────
    default_asset: str = Field(default="eurusd")
    default_timeframe: str = Field(default="1s")

    # ─── Event Bus ──────────────────────────────────────────────────────
    subscriber_queue_size: int = Field(
        default=256, gt=0,
        description="Tamaño de cola por consumidor async (drop-oldest al llenarse)",
    )

    # ─── Análisis (Gemini) ──────────────────────────────────────────────
    gemini_api_key: Optional[str] = Field(
        default=None, description="API key; sin ella se usa el analizador heurístico",
    )
    gemini_model: str = Field(default="gemini-3-flash-preview")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
    )
    analysis_timeout_seconds: float = Field(default=15.0, gt=0)
    analysis_window: int = Field(
        default=30, gt=0, description="Velas recientes enviadas al analizador",
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8890)
    debug: bool = Field(default=False)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "POCKETSYNC_",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton global – se importa donde se necesite
settings = Settings()
