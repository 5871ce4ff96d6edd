from __future__ import annotations

from dataclasses import dataclass
from typing import List, MutableMapping, Optional, Union

from tsbench.utils.metrics.backends.abstract import MetricsBackend
from tsbench.utils.metrics.types import Tags


@dataclass(frozen=True)
class RecordedMetricCall:
    value: int | float
    tags: Tags


RecordedMetricCalls = List[RecordedMetricCall]


RECORDED_METRIC_CALLS: MutableMapping[
    str, MutableMapping[str, List[RecordedMetricCall]]
] = {}


def record_metric_call(
    mtype: str, name: str, value: int | float, tags: Optional[Tags]
) -> None:
    if mtype not in RECORDED_METRIC_CALLS:
        RECORDED_METRIC_CALLS[mtype] = {}

    if name not in RECORDED_METRIC_CALLS[mtype]:
        RECORDED_METRIC_CALLS[mtype][name] = []

    if tags is None:
        tags = {}
    RECORDED_METRIC_CALLS[mtype][name].append(RecordedMetricCall(value, tags))


def clear_recorded_metric_calls() -> None:
    RECORDED_METRIC_CALLS.clear()


def get_recorded_metric_calls(mtype: str, name: str) -> RecordedMetricCalls | None:
    """
    Used in tests to determine if the metrics were called with the correct values
    """
    return RECORDED_METRIC_CALLS.get(mtype, dict()).get(name)


class TestingMetricsBackend(MetricsBackend):
    """
    A metrics backend that records metrics locally, to be verified in tests.
    """

    def increment(
        self, name: str, value: Union[int, float] = 1, tags: Optional[Tags] = None
    ) -> None:
        record_metric_call("increment", name, value, tags)

    def gauge(
        self, name: str, value: Union[int, float], tags: Optional[Tags] = None
    ) -> None:
        record_metric_call("gauge", name, value, tags)

    def timing(
        self, name: str, value: Union[int, float], tags: Optional[Tags] = None
    ) -> None:
        record_metric_call("timing", name, value, tags)

    def events(
        self,
        title: str,
        text: str,
        alert_type: str,
        priority: str,
        tags: Optional[Tags] = None,
    ) -> None:
        record_metric_call("events", title, 1, tags)
