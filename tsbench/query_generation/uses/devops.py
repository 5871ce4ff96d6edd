from __future__ import annotations

from abc import abstractmethod
from datetime import timedelta
from typing import Sequence

from tsbench.query_generation.exceptions import InvalidParameterError
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses.common import Core as BaseCore
from tsbench.query_generation.uses.common import QueryGenerator
from tsbench.utils.durations import format_duration

ALL_HOSTS = 0

DOUBLE_GROUP_BY_DURATION = timedelta(hours=12)
HIGH_CPU_DURATION = timedelta(hours=12)
MAX_ALL_DURATION = timedelta(hours=8)

LABEL_SINGLE_GROUPBY = "single-groupby"
LABEL_DOUBLE_GROUPBY = "double-groupby"
LABEL_LASTPOINT = "lastpoint"
LABEL_MAX_ALL = "cpu-max-all"
LABEL_GROUPBY_ORDERBY_LIMIT = "groupby-orderby-limit"
LABEL_HIGH_CPU = "high-cpu"

CPU_METRICS: Sequence[str] = (
    "usage_user",
    "usage_system",
    "usage_idle",
    "usage_nice",
    "usage_iowait",
    "usage_irq",
    "usage_softirq",
    "usage_steal",
    "usage_guest",
    "usage_guest_nice",
)


def get_all_cpu_metrics() -> Sequence[str]:
    return list(CPU_METRICS)


def get_cpu_metrics_slice(num_metrics: int) -> Sequence[str]:
    """The first ``num_metrics`` CPU metrics, in catalog order."""
    if num_metrics <= 0:
        raise InvalidParameterError("cannot get 0 metrics")
    if num_metrics > len(CPU_METRICS):
        raise InvalidParameterError("too many metrics asked for")
    return list(CPU_METRICS[:num_metrics])


def get_double_group_by_label(db_name: str, num_metrics: int) -> str:
    return f"{db_name} mean of {num_metrics} metrics, all hosts, random {format_duration(DOUBLE_GROUP_BY_DURATION)} by 1h"


def get_max_all_label(db_name: str, n_hosts: int) -> str:
    return f"{db_name} max of all CPU metrics, random {n_hosts:4d} hosts, random {format_duration(MAX_ALL_DURATION)} by 1h"


def get_high_cpu_label(db_name: str, n_hosts: int) -> str:
    if n_hosts < 0:
        raise InvalidParameterError("nHosts cannot be negative")
    if n_hosts == ALL_HOSTS:
        return f"{db_name} CPU over threshold, all hosts"
    return f"{db_name} CPU over threshold, {n_hosts} host(s)"


class Core(BaseCore):
    """Devops use case: a fleet of hosts reporting CPU telemetry."""

    entity = "host"

    def get_random_hosts(self, n: int) -> Sequence[str]:
        return self.get_random_entities(n)


class DevopsGenerator(QueryGenerator):
    """The queries every devops generator knows how to emit."""

    @abstractmethod
    def group_by_time(
        self, qi: HTTPQuery, n_hosts: int, num_metrics: int, time_range: timedelta
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def group_by_order_by_limit(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def group_by_time_and_primary_tag(self, qi: HTTPQuery, num_metrics: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def max_all_cpu(self, qi: HTTPQuery, n_hosts: int, duration: timedelta) -> None:
        raise NotImplementedError

    @abstractmethod
    def last_point_per_host(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def high_cpu_for_hosts(self, qi: HTTPQuery, n_hosts: int) -> None:
        raise NotImplementedError
