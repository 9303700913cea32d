"""
PocketSync – Gemini Analyzer (httpx)
======================================
Adaptador del puerto IMarketAnalyzer sobre la API REST de Gemini
(`models/{model}:generateContent`), pidiendo respuesta JSON con schema.

CONTRATO:
- analyze() NUNCA lanza: red, HTTP status, timeout o JSON inválido →
  AnalysisResult.fallback() (WAIT, confidence 0) y se loguea el error.
- Se envían solo las últimas `analysis_window` velas (30) redondeadas a
  5 decimales, más la secuencia detectada de las últimas 3 velas.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Sequence

import httpx

from pocketsync.application.ports.market_analyzer import IMarketAnalyzer
from pocketsync.domain.entities.candle import Candle
from pocketsync.domain.value_objects.analysis import AnalysisResult
from pocketsync.domain.value_objects.timeframe import Timeframe
from pocketsync.shared.config.settings import Settings, settings as default_settings
from pocketsync.shared.logging.logger import get_logger

logger = get_logger("gemini_analyzer")

SYSTEM_INSTRUCTION = (
    "Você é um algoritmo de alta frequência (HFT) especializado em Pocket Broker OTC. "
    "Sua análise deve ser seca, técnica e focada em probabilidade estatística de "
    "reversão ou continuidade. Retorne exclusivamente JSON."
)

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "signal": {"type": "STRING", "enum": ["BUY", "SELL", "WAIT"]},
        "confidence": {"type": "NUMBER", "description": "Probabilidade de acerto 0-100"},
        "reason": {"type": "STRING", "description": "Estratégia aplicada (ex: MHI, Rejeição, Fluxo)"},
        "strategiesChecked": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Lista de estratégias detectadas no gráfico",
        },
    },
    "required": ["signal", "confidence", "reason", "strategiesChecked"],
}


def detect_sequence(candles: Sequence[Candle]) -> str:
    """Secuencia de las últimas 3 velas: momentum alcista, bajista o rango."""
    last3 = list(candles[-3:])
    if last3 and all(c.is_bullish for c in last3):
        return "Bullish Momentum"
    if last3 and all(c.is_bearish for c in last3):
        return "Bearish Momentum"
    return "Ranging"


def build_prompt(asset_name: str, timeframe: Timeframe, candles: Sequence[Candle], window: int) -> str:
    recent = [
        {
            "o": f"{c.open:.5f}",
            "h": f"{c.high:.5f}",
            "l": f"{c.low:.5f}",
            "c": f"{c.close:.5f}",
            "v": round(c.volume),
        }
        for c in list(candles)[-window:]
    ]
    return (
        f"Análise Profissional OTC: {asset_name} | Timeframe: {timeframe.value}.\n"
        "CONTEXTO TÉCNICO:\n"
        f"- Sequência Atual: {detect_sequence(candles)}\n"
        f"- Histórico ({len(recent)} candles): {json.dumps(recent)}.\n\n"
        "ESTRATÉGIAS OBRIGATÓRIAS PARA VERIFICAR:\n"
        "1. MHI (Padrão de 3 velas em ciclos de 5): Identificar se o próximo candle segue a minoria.\n"
        "2. Rejeição de Pavio: Verificar se houve toque em suportes/resistências locais com retração imediata.\n"
        "3. Fluxo de Vela (Continuity): Se o corpo da última vela é > 70% do tamanho total.\n"
        "4. Micro-Gaps: Verificar saltos de preço entre o fechamento anterior e abertura atual.\n\n"
        "REGRAS:\n"
        "- Foque 100% em assertividade para o PRÓXIMO candle.\n"
        "- Se houver dúvida ou mercado lateral sem volume, retorne WAIT."
    )


def parse_response(payload: Dict[str, Any]) -> AnalysisResult:
    """Extraer el JSON de la primera candidata. Lanza si el formato no es el esperado."""
    text = payload["candidates"][0]["content"]["parts"][0]["text"]
    data = json.loads(text or "{}")
    return AnalysisResult(
        signal=data["signal"],
        confidence=data.get("confidence", 0),
        reason=data.get("reason", ""),
        strategies_checked=data.get("strategiesChecked") or (),
    )


class GeminiAnalyzer(IMarketAnalyzer):
    """
    Uso:
        analyzer = GeminiAnalyzer(api_key="...")
        result = await analyzer.analyze("EUR/USD OTC", Timeframe.M1, candles)
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        cfg = config or default_settings
        self._api_key = api_key
        self._model = cfg.gemini_model
        self._base_url = cfg.gemini_base_url.rstrip("/")
        self._timeout = cfg.analysis_timeout_seconds
        self._window = cfg.analysis_window
        self._client = client

    @property
    def name(self) -> str:
        return f"gemini:{self._model}"

    @property
    def endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    def _request_body(self, asset_name: str, timeframe: Timeframe, candles: Sequence[Candle]) -> dict:
        return {
            "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": build_prompt(asset_name, timeframe, candles, self._window)}],
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    async def _post(self, client: httpx.AsyncClient, body: dict) -> Dict[str, Any]:
        response = await client.post(
            self.endpoint,
            json=body,
            headers={"x-goog-api-key": self._api_key},
            timeout=self._timeout,
        )
        response.raise_for_status()
        return response.json()

    async def analyze(
        self,
        asset_name: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
    ) -> AnalysisResult:
        body = self._request_body(asset_name, timeframe, candles)
        try:
            if self._client is not None:
                payload = await self._post(self._client, body)
            else:
                async with httpx.AsyncClient() as client:
                    payload = await self._post(client, body)
            result = parse_response(payload)
        except httpx.HTTPError as exc:
            logger.error("Análisis Gemini falló (HTTP): %s", exc)
            return AnalysisResult.fallback()
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Respuesta Gemini inválida: %s", exc)
            return AnalysisResult.fallback()

        logger.info(
            "Análisis [%s %s]: %s (%.0f%%)",
            asset_name, timeframe.value, result.signal.value, result.confidence,
        )
        return result
