"""
Helpers for rendering ``timedelta`` values the way the benchmark labels
expect them: ``1s``, ``1m0s``, ``12h0m0s``, ``1.5s``, ``500ms``.
"""
from datetime import timedelta

NANOSECONDS_PER_MICROSECOND = 1000
NANOSECONDS_PER_MILLISECOND = 1000 * NANOSECONDS_PER_MICROSECOND
NANOSECONDS_PER_SECOND = 1000 * NANOSECONDS_PER_MILLISECOND
NANOSECONDS_PER_MINUTE = 60 * NANOSECONDS_PER_SECOND
NANOSECONDS_PER_HOUR = 60 * NANOSECONDS_PER_MINUTE


def duration_nanoseconds(duration: timedelta) -> int:
    return (
        duration.days * 86400 + duration.seconds
    ) * NANOSECONDS_PER_SECOND + duration.microseconds * NANOSECONDS_PER_MICROSECOND


def _format_fraction(value: int, precision: int) -> str:
    whole, fraction = divmod(value, 10**precision)
    digits = f"{fraction:0{precision}d}".rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(duration: timedelta) -> str:
    nanoseconds = duration_nanoseconds(duration)
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)

    if nanoseconds < NANOSECONDS_PER_MICROSECOND:
        return f"{sign}{nanoseconds}ns"
    if nanoseconds < NANOSECONDS_PER_MILLISECOND:
        return f"{sign}{_format_fraction(nanoseconds, 3)}µs"
    if nanoseconds < NANOSECONDS_PER_SECOND:
        return f"{sign}{_format_fraction(nanoseconds, 6)}ms"

    hours, remainder = divmod(nanoseconds, NANOSECONDS_PER_HOUR)
    minutes, remainder = divmod(remainder, NANOSECONDS_PER_MINUTE)
    seconds = _format_fraction(remainder, 9) + "s"

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"
