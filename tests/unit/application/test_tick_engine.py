# tests/unit/application/test_tick_engine.py
import asyncio
import dataclasses

import pytest

from pocketsync.application.services.tick_engine import TickEngine
from pocketsync.application.state.terminal_state import TerminalState
from pocketsync.domain.exceptions.domain_errors import InvalidTimeframeError, UnknownAssetError
from pocketsync.domain.services.bucket_clock import bucket_start
from pocketsync.domain.value_objects.connection_status import ConnectionStatus

SYNCED = ConnectionStatus.SYNCED


class Recorder:
    """Suscriptor que guarda todos los snapshots recibidos"""

    def __init__(self):
        self.snapshots = []

    def __call__(self, snapshot):
        self.snapshots.append(snapshot)

    @property
    def statuses(self):
        return [s.status for s in self.snapshots]

    @property
    def packets(self):
        return [s.packet_info for s in self.snapshots]


@pytest.fixture
def recorder(engine):
    rec = Recorder()
    engine.subscribe(rec)
    return rec


# ─── Handshake ─────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_connect_walks_handshake_states_in_order(engine, recorder, wait_for_status):
    assert engine.connect("eurusd", "1s") is True
    assert engine.status is ConnectionStatus.CONNECTING

    await wait_for_status(engine, SYNCED)

    assert recorder.statuses == [
        ConnectionStatus.CONNECTING,
        ConnectionStatus.AUTHORIZING,
        ConnectionStatus.SYNCED,
    ]
    assert recorder.packets == [
        "WSS_HANDSHAKE_INIT",
        "AUTH_TOKEN_VALIDATED",
        "SUBSCRIBE_SUCCESS_EURUSD",
    ]
    synced = recorder.snapshots[-1]
    assert len(synced.history) == 60
    assert synced.candle is not None
    assert recorder.snapshots[0].history is None


@pytest.mark.asyncio
async def test_synced_candle_is_anchored_after_history(engine, recorder, clock, wait_for_status):
    engine.connect("eurusd", "5s")
    await wait_for_status(engine, SYNCED)

    synced = recorder.snapshots[-1]
    assert synced.candle.time == bucket_start(clock(), 5)
    assert synced.candle.time == synced.history[-1].time + 5_000
    assert synced.candle.open == synced.history[-1].close == synced.price


@pytest.mark.asyncio
async def test_connect_is_idempotent_while_synced(engine, recorder, wait_for_status):
    engine.connect("eurusd", "1m")
    await wait_for_status(engine, SYNCED)
    count = len(recorder.snapshots)
    generation = engine.generation

    assert engine.connect("eurusd", "1m") is False
    await asyncio.sleep(0.05)

    assert len(recorder.snapshots) == count
    assert engine.generation == generation


@pytest.mark.asyncio
async def test_switching_pair_while_synced_forces_reconnect(engine, recorder, wait_for_status):
    engine.connect("eurusd", "1s")
    await wait_for_status(engine, SYNCED)
    recorder.snapshots.clear()

    assert engine.connect("eurusd", "5s") is True
    assert recorder.statuses == [ConnectionStatus.CONNECTING]
    assert recorder.snapshots[0].candle is None
    await wait_for_status(engine, SYNCED)
    assert engine.active_timeframe.value == "5s"


@pytest.mark.asyncio
async def test_reentrant_connect_supersedes_inflight_handshake(engine, recorder, wait_for_status):
    """Un connect() antes de que dispare el handshake previo lo invalida"""
    engine.connect("eurusd", "1s")
    engine.connect("gbpusd", "30s")

    await wait_for_status(engine, SYNCED)
    await asyncio.sleep(0.05)

    assert recorder.statuses == [
        ConnectionStatus.CONNECTING,
        ConnectionStatus.CONNECTING,
        ConnectionStatus.AUTHORIZING,
        ConnectionStatus.SYNCED,
    ]
    assert recorder.packets[-1] == "SUBSCRIBE_SUCCESS_GBPUSD"
    assert engine.active_asset_id == "gbpusd"
    assert engine.generation == 2


@pytest.mark.asyncio
async def test_unknown_asset_raises_without_touching_session(engine, recorder):
    with pytest.raises(UnknownAssetError):
        engine.connect("xauusd", "1s")

    assert engine.status is ConnectionStatus.DISCONNECTED
    assert engine.generation == 0
    assert recorder.snapshots == []


@pytest.mark.asyncio
async def test_invalid_timeframe_raises(engine):
    with pytest.raises(InvalidTimeframeError):
        engine.connect("eurusd", "4h")
    assert engine.status is ConnectionStatus.DISCONNECTED


def test_connect_without_running_loop_leaves_session_untouched(engine, recorder):
    with pytest.raises(RuntimeError):
        engine.connect("eurusd", "1s")

    assert engine.status is ConnectionStatus.DISCONNECTED
    assert engine.generation == 0
    assert recorder.snapshots == []


@pytest.mark.asyncio
async def test_disconnect_clears_session(engine, recorder, wait_for_status):
    engine.connect("eurusd", "1s")
    await wait_for_status(engine, SYNCED)

    engine.disconnect()

    assert engine.status is ConnectionStatus.DISCONNECTED
    last = recorder.snapshots[-1]
    assert last.status is ConnectionStatus.DISCONNECTED
    assert last.candle is None
    assert last.packet_info == "WSS_CLOSED"
    assert engine.step() is False


@pytest.mark.asyncio
async def test_disconnect_during_handshake_cancels_it(engine, recorder):
    engine.connect("eurusd", "1s")
    engine.disconnect()
    await asyncio.sleep(0.05)

    assert engine.status is ConnectionStatus.DISCONNECTED
    assert ConnectionStatus.SYNCED not in recorder.statuses


# ─── Stepping ──────────────────────────────────────────────────────────

def test_step_before_connect_is_noop(engine, recorder):
    assert engine.step() is False
    assert recorder.snapshots == []


@pytest.mark.asyncio
async def test_live_candle_changes_time_only_at_bucket_boundaries(
    engine, recorder, clock, wait_for_status,
):
    engine.connect("eurusd", "5s")
    await wait_for_status(engine, SYNCED)
    recorder.snapshots.clear()

    for _ in range(200):
        clock.advance(100)
        assert engine.step() is True

    for prev, cur in zip(recorder.snapshots, recorder.snapshots[1:]):
        if cur.candle.time == prev.candle.time:
            assert cur.candle.high >= prev.candle.high
            assert cur.candle.low <= prev.candle.low
            assert cur.candle.volume >= prev.candle.volume
        else:
            assert cur.candle.time == prev.candle.time + 5_000
            assert cur.candle.open == cur.candle.high == cur.candle.low == cur.candle.close
            assert cur.candle.volume == 0

    times = {s.candle.time for s in recorder.snapshots}
    # 20 s de simulación en buckets de 5 s, empezando 250 ms dentro del primero
    assert len(times) == 5
    assert max(times) == bucket_start(clock(), 5)


@pytest.mark.asyncio
async def test_heartbeat_packet_every_20_steps(engine, recorder, clock, wait_for_status):
    engine.connect("eurusd", "1s")
    await wait_for_status(engine, SYNCED)
    recorder.snapshots.clear()

    for _ in range(40):
        clock.advance(100)
        engine.step()

    packets = recorder.packets
    assert packets[19] == "STREAM_DATA_20"
    assert packets[39] == "STREAM_DATA_40"
    assert [p for p in packets if p is not None] == ["STREAM_DATA_20", "STREAM_DATA_40"]
    assert engine.message_count == 40


@pytest.mark.asyncio
async def test_usdjpy_first_tick_scales_with_yen_volatility(engine, recorder, clock, wait_for_status):
    engine.connect("usdjpy", "1m")
    await wait_for_status(engine, SYNCED)

    synced = recorder.snapshots[-1]
    # el histórico arranca en el precio base del asset
    assert synced.history[0].open == 149.520
    assert all(abs(c.close - c.open) <= 5 * 0.012 for c in synced.history)

    trend = engine.assets.get("usdjpy").trend
    clock.advance(100)
    engine.step()

    first_tick = recorder.snapshots[-1].price
    assert abs(first_tick - synced.price) <= 0.5 * 0.012 + abs(trend) + 1e-9


# ─── Snapshots / suscriptores ──────────────────────────────────────────

@pytest.mark.asyncio
async def test_snapshots_are_frozen_copies(engine, recorder, clock, wait_for_status):
    engine.connect("eurusd", "1m")
    await wait_for_status(engine, SYNCED)
    clock.advance(100)
    engine.step()
    first = recorder.snapshots[-1]

    for _ in range(30):
        clock.advance(100)
        engine.step()

    assert first.candle != recorder.snapshots[-1].candle
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.candle.close = 0.0


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_affect_others(engine, recorder, wait_for_status):
    def broken(snapshot):
        raise RuntimeError("boom")

    engine.subscribe(broken)
    late = Recorder()
    engine.subscribe(late)

    engine.connect("eurusd", "1s")
    await wait_for_status(engine, SYNCED)

    assert len(recorder.snapshots) == 3
    assert len(late.snapshots) == 3


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery(engine, wait_for_status):
    rec = Recorder()
    unsubscribe = engine.subscribe(rec)
    engine.connect("eurusd", "1s")
    unsubscribe()

    await wait_for_status(engine, SYNCED)
    assert len(rec.snapshots) == 1


# ─── start / stop ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_start_runs_simulation_loop_until_stopped(fast_settings, rng):
    engine = TickEngine(fast_settings, rng=rng)
    rec = Recorder()
    engine.subscribe(rec)

    await engine.start()
    await engine.start()  # idempotente
    engine.connect("eurusd", "1s")
    await asyncio.sleep(0.2)

    assert engine.is_running
    assert engine.status is SYNCED
    assert engine.message_count > 0

    await engine.stop()
    count = len(rec.snapshots)
    await asyncio.sleep(0.05)

    assert not engine.is_running
    assert len(rec.snapshots) == count
    assert engine.status is ConnectionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_stop_tells_subscribers_to_clear(fast_settings, rng, wait_for_status):
    engine = TickEngine(fast_settings, rng=rng)
    terminal = TerminalState()
    engine.subscribe(terminal.apply)
    await engine.start()
    engine.connect("eurusd", "1s")
    await wait_for_status(engine, SYNCED)
    assert len(terminal.series) > 0

    await engine.stop()

    assert terminal.status is ConnectionStatus.DISCONNECTED
    assert terminal.logs[0] == "WSS_CLOSED"
    assert len(terminal.series) == 0
    assert terminal.current_price == 0.0


@pytest.mark.asyncio
async def test_unsubscribing_everyone_keeps_simulation_running(fast_settings, rng):
    engine = TickEngine(fast_settings, rng=rng)
    unsubscribe = engine.subscribe(Recorder())
    await engine.start()
    engine.connect("eurusd", "1s")
    unsubscribe()

    await asyncio.sleep(0.2)
    assert engine.message_count > 0
    await engine.stop()


def test_get_status_reports_session(engine):
    status = engine.get_status()
    assert status["status"] == "disconnected"
    assert status["running"] is False
    assert status["price"] == 0.0
