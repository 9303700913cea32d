"""
PocketSync – Domain Value Object: AnalysisResult
==================================================
Resultado inmutable de un análisis de mercado (BUY / SELL / WAIT).

- confidence se normaliza a [0, 100].
- WAIT con confidence 0 es el resultado seguro ante cualquier fallo.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

FALLBACK_REASON = "Instabilidade no processamento neural."


class SignalType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    WAIT = "WAIT"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Señal sugerida para la PRÓXIMA vela."""

    signal: SignalType
    confidence: float
    reason: str
    strategies_checked: tuple = ()
    timestamp: int = field(default_factory=_now_ms)

    def __post_init__(self) -> None:
        object.__setattr__(self, "signal", SignalType(self.signal))
        object.__setattr__(
            self, "confidence", max(0.0, min(100.0, float(self.confidence))),
        )
        object.__setattr__(self, "strategies_checked", tuple(self.strategies_checked))

    @classmethod
    def fallback(cls, reason: str = FALLBACK_REASON) -> "AnalysisResult":
        """Resultado seguro cuando el backend de análisis falla."""
        return cls(signal=SignalType.WAIT, confidence=0, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        """Serialización para API / WebSocket."""
        return {
            "signal": self.signal.value,
            "confidence": round(self.confidence, 1),
            "reason": self.reason,
            "strategies_checked": list(self.strategies_checked),
            "timestamp": self.timestamp,
        }
