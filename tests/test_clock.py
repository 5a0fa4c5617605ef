from datetime import datetime, timedelta, timezone

import pytest

from Decido.share.Clock import Clock, FixedClock, SystemClock


def test_clock_is_abstract():
    with pytest.raises(TypeError):
        Clock()


def test_fixed_clock_only_moves_when_told():
    clock = FixedClock(datetime(2025, 3, 3, 10, 0, tzinfo=timezone(timedelta(hours=1))))
    assert clock.now() == datetime(2025, 3, 3, 9, 0)

    assert clock.advance(timedelta(minutes=5)) == datetime(2025, 3, 3, 9, 5)
    clock.set(datetime(2025, 3, 4, 9, 0))
    assert clock.now() == datetime(2025, 3, 4, 9, 0)


def test_system_clock_is_naive_utc():
    assert SystemClock().now().tzinfo is None
