from datetime import datetime
from typing import Any, Mapping

SUPPORTED_QUERY_METHODS = {"GET", "POST"}


def _parse(value: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(value, fmt)
    except ValueError as e:
        raise ValueError(f"timestamp {value!r} does not match {fmt!r}") from e


def validate_settings(locals: Mapping[str, Any]) -> None:
    if locals["DEFAULT_SCALE"] < 1:
        raise ValueError(
            f"DEFAULT_SCALE must be at least 1, got {locals['DEFAULT_SCALE']}"
        )

    if locals["QUERY_METHOD"] not in SUPPORTED_QUERY_METHODS:
        raise ValueError(f"Unsupported QUERY_METHOD {locals['QUERY_METHOD']!r}")

    if not locals["QUERY_PATH"].startswith("/"):
        raise ValueError("QUERY_PATH must be an absolute path")

    start = _parse(locals["DEFAULT_TIMESTAMP_START"], locals["TIMESTAMP_FORMAT"])
    end = _parse(locals["DEFAULT_TIMESTAMP_END"], locals["TIMESTAMP_FORMAT"])
    if end <= start:
        raise ValueError(
            "DEFAULT_TIMESTAMP_END must be after DEFAULT_TIMESTAMP_START"
        )

    if locals["BUCKET_SETTLE_SECONDS"] < 0:
        raise ValueError("BUCKET_SETTLE_SECONDS cannot be negative")
