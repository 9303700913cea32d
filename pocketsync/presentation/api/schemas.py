"""
PocketSync – API Schemas (Pydantic)
=====================================
Schemas de validación para request/response de la API REST.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    service: str


class ConnectRequest(BaseModel):
    asset_id: str = Field(..., min_length=1)
    timeframe: str


class ConnectResponse(BaseModel):
    started: bool
    status: str
    asset_id: str
    timeframe: str
    generation: int


class CandleSchema(BaseModel):
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


class CandlesResponse(BaseModel):
    asset_id: str
    timeframe: str
    count: int
    candles: List[CandleSchema]


class AnalysisSchema(BaseModel):
    signal: str
    confidence: float
    reason: str
    strategies_checked: List[str] = []
    timestamp: int


class AnalysisResponse(BaseModel):
    executed: bool
    analysis: Optional[AnalysisSchema] = None
    blocked_reason: Optional[str] = None
