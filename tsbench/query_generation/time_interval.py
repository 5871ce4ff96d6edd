from __future__ import annotations

from datetime import datetime, timedelta, timezone
from random import Random

from tsbench import settings
from tsbench.query_generation.exceptions import (
    GeneratorMisuseError,
    InvalidParameterError,
)
from tsbench.utils.durations import (
    NANOSECONDS_PER_MICROSECOND,
    duration_nanoseconds,
    format_duration,
)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return as_utc(value).strftime(settings.TIMESTAMP_FORMAT)


class TimeInterval:
    """
    A half open ``[start, end)`` interval bound to the random source used to
    pick windows inside it. Windows share the source of the interval they
    were drawn from.
    """

    def __init__(self, start: datetime, end: datetime, random: Random) -> None:
        start = as_utc(start)
        end = as_utc(end)
        if end <= start:
            raise GeneratorMisuseError(
                f"end of interval must be after its start: start {format_timestamp(start)}, end {format_timestamp(end)}"
            )
        self.__start = start
        self.__end = end
        self.__random = random

    @property
    def start(self) -> datetime:
        return self.__start

    @property
    def end(self) -> datetime:
        return self.__end

    @property
    def duration(self) -> timedelta:
        return self.__end - self.__start

    def start_string(self) -> str:
        return format_timestamp(self.__start)

    def end_string(self) -> str:
        return format_timestamp(self.__end)

    def must_rand_window(self, window: timedelta) -> TimeInterval:
        if window <= timedelta(0):
            raise InvalidParameterError(
                f"random window must be positive: window {format_duration(window)}"
            )
        if window > self.duration:
            raise InvalidParameterError(
                f"random window larger than TimeInterval: window {format_duration(window)}, interval {format_duration(self.duration)}"
            )

        max_offset = duration_nanoseconds(self.duration) - duration_nanoseconds(window)
        offset = self.__random.randint(0, max_offset)
        start = self.__start + timedelta(
            microseconds=offset // NANOSECONDS_PER_MICROSECOND
        )
        return TimeInterval(start, start + window, self.__random)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, TimeInterval)
            and self.__start == other.start
            and self.__end == other.end
        )

    def __repr__(self) -> str:
        return f"TimeInterval({self.start_string()}, {self.end_string()})"
