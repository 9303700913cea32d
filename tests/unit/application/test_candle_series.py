# tests/unit/application/test_candle_series.py
from pocketsync.application.state.candle_series import CandleSeries


def test_series_caps_at_100_keeping_most_recent(make_candle):
    series = CandleSeries()
    for i in range(150):
        series.upsert(make_candle(i * 1_000, 1.0, 1.1))

    times = [c.time for c in series]
    assert len(series) == 100
    assert times == [i * 1_000 for i in range(50, 150)]


def test_same_time_replaces_last_candle(make_candle):
    series = CandleSeries()
    series.upsert(make_candle(1_000, 1.0, 1.1))

    appended = series.upsert(make_candle(1_000, 1.0, 1.3, volume=50))

    assert appended is False
    assert len(series) == 1
    assert series.latest.close == 1.3
    assert series.latest.volume == 50


def test_older_candle_is_ignored(make_candle):
    series = CandleSeries()
    series.upsert(make_candle(5_000, 1.0, 1.1))

    assert series.upsert(make_candle(4_000, 1.0, 1.1)) is False
    assert [c.time for c in series] == [5_000]


def test_replace_keeps_last_entries(make_candle):
    series = CandleSeries(max_size=10)
    series.replace(make_candle(i, 1.0, 1.0) for i in range(25))

    assert [c.time for c in series] == list(range(15, 25))


def test_last_and_clear(make_candle):
    series = CandleSeries()
    series.replace([make_candle(i, 1.0, 1.0) for i in range(5)])

    assert [c.time for c in series.last(2)] == [3, 4]
    assert series.last(0) == []
    assert len(series.last()) == 5

    series.clear()
    assert series.latest is None
    assert series.to_list() == []
