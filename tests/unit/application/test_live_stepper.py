# tests/unit/application/test_live_stepper.py
import dataclasses
import random

import pytest

from pocketsync.application.services.candle_builder import LiveCandle
from pocketsync.application.services.live_stepper import LiveStepper
from pocketsync.application.state.session_state import SessionState
from pocketsync.domain.entities.asset import ASSETS_BY_ID
from pocketsync.domain.entities.asset_state import AssetState
from pocketsync.domain.services.bucket_clock import bucket_start
from pocketsync.domain.value_objects.connection_status import ConnectionStatus
from pocketsync.domain.value_objects.timeframe import Timeframe

NOW_MS = 1_792_411_200_250


def _synced_session(asset_id="eurusd", timeframe=Timeframe.S5):
    session = SessionState()
    session.restart(asset_id, timeframe)
    session.status = ConnectionStatus.SYNCED
    return session


def _state(asset_id="eurusd"):
    return AssetState.initial(ASSETS_BY_ID[asset_id], random.Random(5))


# ─── LiveCandle ────────────────────────────────────────────────────────

def test_anchor_builds_flat_candle_at_bucket_start():
    candle = LiveCandle.anchor(NOW_MS, 60, 1.2345)

    assert candle.time == bucket_start(NOW_MS, 60)
    assert candle.open == candle.high == candle.low == candle.close == 1.2345
    assert candle.volume == 0


def test_update_tracks_extremes_and_accumulates_volume():
    candle = LiveCandle.anchor(NOW_MS, 1, 100.0)
    candle.update(101.0, 5.0)
    candle.update(99.5, 2.0)
    candle.update(100.2, 0.5)

    assert (candle.open, candle.high, candle.low, candle.close) == (100.0, 101.0, 99.5, 100.2)
    assert candle.volume == pytest.approx(7.5)


def test_freeze_returns_independent_immutable_copy():
    candle = LiveCandle.anchor(NOW_MS, 1, 100.0)
    frozen = candle.freeze()
    candle.update(105.0, 1.0)

    assert frozen.high == 100.0
    with pytest.raises(dataclasses.FrozenInstanceError):
        frozen.high = 1.0


# ─── LiveStepper ───────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "status",
    [s for s in ConnectionStatus if s is not ConnectionStatus.SYNCED],
)
def test_step_is_noop_unless_synced(status):
    session = _synced_session()
    session.status = status
    state = _state()
    price = state.price

    assert LiveStepper(random.Random(1)).step(session, state, NOW_MS) is False
    assert state.price == price
    assert session.message_count == 0


def test_step_is_noop_without_active_asset():
    session = SessionState(status=ConnectionStatus.SYNCED)
    assert LiveStepper(random.Random(1)).step(session, _state(), NOW_MS) is False


def test_first_step_anchors_candle_and_counts():
    session = _synced_session()
    state = _state()

    assert LiveStepper(random.Random(1)).step(session, state, NOW_MS)

    candle = session.current_candle
    assert candle.time == bucket_start(NOW_MS, 5)
    assert candle.open == candle.close == state.price
    assert session.message_count == 1


def test_price_step_is_bounded_by_volatility_and_trend():
    session = _synced_session("usdjpy", Timeframe.M1)
    state = _state("usdjpy")
    stepper = LiveStepper(random.Random(2), trend_change_probability=0.0)

    for i in range(50):
        before = state.price
        stepper.step(session, state, NOW_MS + i * 100)
        assert abs(state.price - before - state.trend) <= 0.5 * state.volatility + 1e-12


def test_candle_is_monotonic_within_bucket():
    session = _synced_session(timeframe=Timeframe.M1)
    state = _state()
    stepper = LiveStepper(random.Random(3))
    start = bucket_start(NOW_MS, 60)

    stepper.step(session, state, NOW_MS)
    prev = session.current_candle.freeze()
    for i in range(1, 300):
        now = NOW_MS + i * 100
        stepper.step(session, state, now)
        cur = session.current_candle.freeze()
        if bucket_start(now, 60) != start:
            break
        assert cur.time == prev.time
        assert cur.open == prev.open
        assert cur.high >= prev.high
        assert cur.low <= prev.low
        assert cur.volume >= prev.volume
        assert cur.close == state.price
        assert cur.low <= min(cur.open, cur.close) <= max(cur.open, cur.close) <= cur.high
        prev = cur


def test_bucket_change_opens_new_flat_candle():
    session = _synced_session(timeframe=Timeframe.S1)
    state = _state()
    stepper = LiveStepper(random.Random(4))

    for i in range(5):
        stepper.step(session, state, NOW_MS + i * 100)
    first = session.current_candle.freeze()

    stepper.step(session, state, NOW_MS + 1_000)
    second = session.current_candle

    assert second.time == first.time + 1_000
    assert second.open == second.high == second.low == second.close == state.price
    assert second.volume == 0


def test_missed_buckets_are_not_backfilled():
    """Un salto de varios buckets abre solo el más reciente"""
    session = _synced_session(timeframe=Timeframe.S5)
    state = _state()
    stepper = LiveStepper(random.Random(4))

    stepper.step(session, state, NOW_MS)
    later = NOW_MS + 47_000
    stepper.step(session, state, later)

    assert session.current_candle.time == bucket_start(later, 5)
    assert session.message_count == 2


def test_trend_rerolls_within_regime_bounds():
    session = _synced_session("gbpjpy")
    state = _state("gbpjpy")
    stepper = LiveStepper(random.Random(6), trend_change_probability=1.0)

    for i in range(20):
        stepper.step(session, state, NOW_MS + i * 100)
        assert abs(state.trend) <= 0.5 * state.volatility * 0.4


def test_trend_never_changes_with_zero_probability():
    session = _synced_session()
    state = _state()
    trend = state.trend
    stepper = LiveStepper(random.Random(6), trend_change_probability=0.0)

    for i in range(100):
        stepper.step(session, state, NOW_MS + i * 100)
    assert state.trend == trend


def test_price_has_no_floor():
    """Sin piso: una deriva negativa fuerte lleva el precio por debajo de cero"""
    session = _synced_session()
    state = _state()
    state.price = 0.0001
    state.trend = -0.01
    stepper = LiveStepper(random.Random(6), trend_change_probability=0.0)

    stepper.step(session, state, NOW_MS)

    assert state.price < 0
