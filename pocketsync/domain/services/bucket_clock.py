"""
PocketSync – Bucket Clock
===========================
Alinea timestamps (ms) al inicio del bucket de un timeframe.

    bucket_start(t, T) = floor(t / (T*1000)) * (T*1000)

Dos timestamps caen en el mismo bucket si y solo si pertenecen al mismo
intervalo semiabierto [k*T*1000, (k+1)*T*1000) alineado al epoch.
Lo usan tanto el backfill histórico como el stepper en vivo.
"""

from __future__ import annotations

import math

from pocketsync.domain.exceptions.domain_errors import InvalidTimeframeError


def _span_ms(timeframe_seconds: int) -> int:
    if timeframe_seconds <= 0:
        raise InvalidTimeframeError(timeframe_seconds)
    return int(timeframe_seconds) * 1000


def bucket_start(epoch_ms: float, timeframe_seconds: int) -> int:
    """Inicio (ms) del bucket que contiene epoch_ms."""
    span = _span_ms(timeframe_seconds)
    return math.floor(epoch_ms / span) * span


def next_bucket_start(epoch_ms: float, timeframe_seconds: int) -> int:
    """Inicio (ms) del bucket siguiente al que contiene epoch_ms."""
    return bucket_start(epoch_ms, timeframe_seconds) + _span_ms(timeframe_seconds)
