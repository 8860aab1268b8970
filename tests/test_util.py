import time
from datetime import datetime, timedelta, timezone

import pytest

from kafkastate.util import Timeout, current_time_millis, millis_to_epoch

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_never_as_millis_is_minus_one():
    assert Timeout.never().as_millis() == -1


def test_after_as_millis_matches_duration():
    assert Timeout.after(timedelta(milliseconds=2500)).as_millis() == 2500


def test_after_zero_as_millis():
    assert Timeout.after(timedelta(0)).as_millis() == 0


def test_from_value_none_is_never():
    assert Timeout.from_value(None) == Timeout.never()


def test_from_value_duration_is_after():
    d = timedelta(seconds=7)
    assert Timeout.from_value(d) == Timeout.after(d)


def test_from_value_timeout_passes_through():
    t = Timeout.after(timedelta(seconds=1))
    assert Timeout.from_value(t) is t


def test_from_value_rejects_other_types():
    with pytest.raises(TypeError):
        Timeout.from_value("5s")


def test_negative_duration_rejected():
    with pytest.raises(ValueError):
        Timeout.after(timedelta(seconds=-1))


def test_subtract_finite_timeouts():
    a = timedelta(seconds=5)
    b = timedelta(seconds=2)
    result = Timeout.after(a) - Timeout.after(b)
    assert result.duration == a - b
    assert result < Timeout.after(a)


def test_subtract_from_never_stays_never():
    assert Timeout.never() - Timeout.after(timedelta(seconds=3)) == Timeout.never()


def test_subtract_never_raises():
    with pytest.raises(ValueError):
        Timeout.after(timedelta(seconds=3)) - Timeout.never()
    with pytest.raises(ValueError):
        Timeout.never() - Timeout.never()


def test_subtract_underflow_raises():
    with pytest.raises(ValueError):
        Timeout.after(timedelta(seconds=1)) - Timeout.after(timedelta(seconds=2))


def test_ordering():
    short = Timeout.after(timedelta(seconds=1))
    long = Timeout.after(timedelta(days=10000))
    never = Timeout.never()
    assert short < long < never
    assert not never < long
    assert sorted([never, long, short]) == [short, long, never]
    assert never >= never


def test_millis_to_epoch_at_epoch():
    assert millis_to_epoch(EPOCH) == 0


def test_millis_to_epoch_before_epoch_is_zero():
    assert millis_to_epoch(EPOCH - timedelta(days=1)) == 0


def test_millis_to_epoch_offset():
    assert millis_to_epoch(EPOCH + timedelta(milliseconds=1234)) == 1234


def test_millis_to_epoch_naive_is_utc():
    naive = datetime(2020, 5, 16, 18, 8, 50)
    aware = naive.replace(tzinfo=timezone.utc)
    assert millis_to_epoch(naive) == millis_to_epoch(aware)


def test_current_time_millis_is_now():
    before = time.time_ns() // 1_000_000
    now = current_time_millis()
    after = time.time_ns() // 1_000_000
    assert before <= now <= after


def test_current_time_matches_millis_to_epoch():
    now = current_time_millis()
    via_datetime = millis_to_epoch(datetime.now(timezone.utc))
    assert abs(via_datetime - now) < 5000