# tests/conftest.py
import asyncio
import random

import pytest

from pocketsync.application.services.tick_engine import TickEngine
from pocketsync.domain.entities.candle import Candle
from pocketsync.shared.config.settings import Settings

# 250 ms después de un límite de bucket de 5m (y por tanto de 1s, 5s, 30s, 1m)
BASE_NOW_MS = 1_792_411_200_250


class FakeClock:
    """Reloj manual en milisegundos"""

    def __init__(self, now_ms: float = BASE_NOW_MS):
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


def _make_candle(time, open_, close, high=None, low=None, volume=10.0):
    """Vela de prueba con high/low coherentes por defecto"""
    return Candle(
        time=time,
        open=open_,
        high=high if high is not None else max(open_, close),
        low=low if low is not None else min(open_, close),
        close=close,
        volume=volume,
    )


async def _wait_for_status(engine, status, timeout=2.0):
    """Esperar a que el motor alcance un status (polling sobre el loop)"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while engine.status is not status:
        if loop.time() > deadline:
            raise AssertionError(f"status {engine.status} != {status}")
        await asyncio.sleep(0.005)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fast_settings():
    """Settings con handshake y tick acelerados para tests"""
    return Settings(
        _env_file=None,
        tick_interval_ms=5,
        handshake_connect_delay_ms=10,
        handshake_auth_delay_ms=10,
        default_asset="",
        gemini_api_key=None,
    )


@pytest.fixture
def engine(fast_settings, clock, rng):
    return TickEngine(fast_settings, clock=clock, rng=rng)


@pytest.fixture
def make_candle():
    return _make_candle


@pytest.fixture
def wait_for_status():
    return _wait_for_status
