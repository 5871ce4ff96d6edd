from datetime import datetime, timedelta, timezone
from random import Random
from unittest.mock import Mock

import pytest

from tsbench.query_generation.exceptions import (
    GeneratorMisuseError,
    InvalidParameterError,
)
from tsbench.query_generation.time_interval import TimeInterval, format_timestamp

START = datetime(2016, 1, 1, tzinfo=timezone.utc)


def test_strings() -> None:
    interval = TimeInterval(START, START + timedelta(hours=30, seconds=1), Random(1))

    assert interval.start_string() == "2016-01-01T00:00:00Z"
    assert interval.end_string() == "2016-01-02T06:00:01Z"
    assert interval.duration == timedelta(hours=30, seconds=1)


def test_naive_datetimes_are_utc() -> None:
    naive = TimeInterval(datetime(2016, 1, 1), datetime(2016, 1, 2), Random(1))
    aware = TimeInterval(START, START + timedelta(days=1), Random(1))

    assert naive == aware
    assert naive.start.tzinfo == timezone.utc


def test_other_timezones_are_converted() -> None:
    tz = timezone(timedelta(hours=2))
    value = datetime(2016, 1, 1, 2, 30, tzinfo=tz)
    assert format_timestamp(value) == "2016-01-01T00:30:00Z"


@pytest.mark.parametrize(
    "end",
    [
        pytest.param(START, id="empty"),
        pytest.param(START - timedelta(seconds=1), id="reversed"),
    ],
)
def test_end_must_follow_start(end: datetime) -> None:
    with pytest.raises(GeneratorMisuseError, match="end of interval must be after"):
        TimeInterval(START, end, Random(1))


def test_rand_window_uses_drawn_offset() -> None:
    random = Mock(spec=Random)
    random.randint.return_value = 982 * 10**9 + 123_456_789
    interval = TimeInterval(START, START + timedelta(hours=2), random)

    window = interval.must_rand_window(timedelta(hours=1))

    random.randint.assert_called_once_with(0, 3600 * 10**9)
    # nanoseconds below a microsecond are dropped
    assert window.start == START + timedelta(seconds=982, microseconds=123_456)
    assert window.end == window.start + timedelta(hours=1)
    assert window.start_string() == "2016-01-01T00:16:22Z"
    assert window.end_string() == "2016-01-01T01:16:22Z"


def test_rand_window_of_whole_interval() -> None:
    random = Mock(spec=Random)
    random.randint.return_value = 0
    interval = TimeInterval(START, START + timedelta(hours=1), random)

    assert interval.must_rand_window(timedelta(hours=1)) == interval
    random.randint.assert_called_once_with(0, 0)


def test_rand_window_too_large() -> None:
    interval = TimeInterval(START, START + timedelta(hours=1), Random(1))

    with pytest.raises(InvalidParameterError) as error:
        interval.must_rand_window(timedelta(hours=1, seconds=1))
    assert (
        error.value.message
        == "random window larger than TimeInterval: window 1h0m1s, interval 1h0m0s"
    )


@pytest.mark.parametrize("window", [timedelta(0), timedelta(seconds=-1)])
def test_rand_window_must_be_positive(window: timedelta) -> None:
    interval = TimeInterval(START, START + timedelta(hours=1), Random(1))

    with pytest.raises(InvalidParameterError, match="random window must be positive"):
        interval.must_rand_window(window)


def test_rand_windows_stay_inside_interval() -> None:
    span = timedelta(hours=7, minutes=3, seconds=11)
    interval = TimeInterval(START, START + span, Random(99))

    for _ in range(500):
        window = interval.must_rand_window(timedelta(minutes=10))
        assert window.duration == timedelta(minutes=10)
        assert interval.start <= window.start
        assert window.end <= interval.end


def test_rand_window_is_reproducible() -> None:
    def windows(seed: int) -> list:
        interval = TimeInterval(START, START + timedelta(days=1), Random(seed))
        return [interval.must_rand_window(timedelta(hours=1)) for _ in range(20)]

    assert windows(123) == windows(123)
    assert windows(123) != windows(124)


def test_windows_share_random_source() -> None:
    random = Random(5)
    interval = TimeInterval(START, START + timedelta(days=1), random)
    window = interval.must_rand_window(timedelta(hours=4))

    expected = Random(5)
    expected.randint(0, 20 * 3600 * 10**9)
    expected_offset = expected.randint(0, 3 * 3600 * 10**9)

    nested = window.must_rand_window(timedelta(hours=1))
    assert nested.start == window.start + timedelta(
        microseconds=expected_offset // 1000
    )
