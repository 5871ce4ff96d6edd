from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from tsbench.query_generation.databases.influx_2.base import DB_LABEL, BaseGenerator
from tsbench.query_generation.databases.influx_2.filters import (
    field_filter_clause,
    tag_filter_clause,
)
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses import devops
from tsbench.utils.durations import format_duration

GROUP_BY_TIME_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark") \n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu" and %(metrics)s and %(hosts)s)\n'
    "\t|> aggregateWindow(every: 1m, fn: max, createEmpty: false)\n"
    "\t|> yield()\n"
    "\t"
)

GROUP_BY_ORDER_BY_LIMIT_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu" and r._field == "usage_user")\n'
    "\t|> aggregateWindow(every: 1m, fn: max)\n"
    '\t|> sort(columns: ["_time"], desc: true)\n'
    "\t|> limit(n: 5)\n"
    "\t"
)

GROUP_BY_TIME_AND_PRIMARY_TAG_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu" and %(metrics)s)\n'
    '\t|> group(columns: ["_time", "hostname"])\n'
    "\t|> aggregateWindow(every: 1h, fn: mean)\n"
    '\t|> yield(name: "mean")\n'
    "\t"
)

MAX_ALL_CPU_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu" and %(metrics)s and %(hosts)s)\n'
    "\t|> aggregateWindow(every: 1h, fn: max)\n"
    '\t|> yield(name: "max")\n'
    "\t"
)

LAST_POINT_PER_HOST_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu")\n'
    '\t|> group(columns: ["hostname"])\n'
    "\t|> last()\n"
    "\t"
)

HIGH_CPU_FOR_HOSTS_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "cpu" and r._field == "usage_user" and r._value > 90.0%(hosts)s)\n'
    '\t|> yield(name: "high_cpu")\n'
    "\t"
)


class Devops(devops.Core, devops.DevopsGenerator):
    """Influx 2.x flavoured queries for every devops query type."""

    def __init__(
        self, start: datetime, end: datetime, scale: int, base: BaseGenerator
    ) -> None:
        super().__init__(start, end, scale, base.random)
        self.base = base

    def generate_empty_query(self) -> HTTPQuery:
        return self.base.generate_empty_query()

    def fill_in_query(
        self, qi: HTTPQuery, human_label: str, human_desc: str, flux_query: str
    ) -> None:
        self.base.fill_in_query(qi, human_label, human_desc, flux_query)

    def get_host_filter_clause_with_hostnames(self, hostnames: Sequence[str]) -> str:
        return tag_filter_clause("hostname", hostnames)

    def get_host_filter_clause(self, n_hosts: int) -> str:
        return self.get_host_filter_clause_with_hostnames(
            self.get_random_hosts(n_hosts)
        )

    def get_metrics_filter_clause(self, metrics: Sequence[str]) -> str:
        return field_filter_clause(metrics)

    def group_by_time(
        self, qi: HTTPQuery, n_hosts: int, num_metrics: int, time_range: timedelta
    ) -> None:
        """
        MAX of ``num_metrics`` cpu metrics per minute for ``n_hosts`` hosts
        over a random window of ``time_range``.
        """
        interval = self.interval.must_rand_window(time_range)
        metrics = devops.get_cpu_metrics_slice(num_metrics)
        metrics_filter = self.get_metrics_filter_clause(metrics)
        hosts_filter = self.get_host_filter_clause(n_hosts)

        human_label = f"{DB_LABEL} {num_metrics} cpu metric(s), random {n_hosts:4d} hosts, random {format_duration(time_range)} by 1m"
        human_desc = f"{human_label}: {interval.start_string()}"
        flux_query = GROUP_BY_TIME_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "metrics": metrics_filter,
            "hosts": hosts_filter,
        }
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def group_by_order_by_limit(self, qi: HTTPQuery) -> None:
        """
        MAX usage_user per minute for the five minutes before a random end.
        Only the end of the random hour window is used.
        """
        interval = self.interval.must_rand_window(timedelta(hours=1))

        human_label = f"{DB_LABEL} max cpu over last 5 min-intervals (random end)"
        human_desc = f"{human_label}: {interval.start_string()}"
        flux_query = GROUP_BY_ORDER_BY_LIMIT_QUERY % {"end": interval.end_string()}
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def group_by_time_and_primary_tag(self, qi: HTTPQuery, num_metrics: int) -> None:
        """Mean of ``num_metrics`` cpu metrics per host per hour over half a day."""
        metrics = devops.get_cpu_metrics_slice(num_metrics)
        interval = self.interval.must_rand_window(devops.DOUBLE_GROUP_BY_DURATION)
        metrics_filter = self.get_metrics_filter_clause(metrics)

        human_label = devops.get_double_group_by_label(DB_LABEL, num_metrics)
        human_desc = f"{human_label}: {interval.start_string()}"
        flux_query = GROUP_BY_TIME_AND_PRIMARY_TAG_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "metrics": metrics_filter,
        }
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def max_all_cpu(self, qi: HTTPQuery, n_hosts: int, duration: timedelta) -> None:
        """MAX of every cpu metric per hour for ``n_hosts`` hosts."""
        interval = self.interval.must_rand_window(duration)
        hosts_filter = self.get_host_filter_clause(n_hosts)
        metrics_filter = self.get_metrics_filter_clause(devops.get_all_cpu_metrics())

        human_label = devops.get_max_all_label(DB_LABEL, n_hosts)
        human_desc = f"{human_label}: {interval.start_string()}"
        flux_query = MAX_ALL_CPU_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "metrics": metrics_filter,
            "hosts": hosts_filter,
        }
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def last_point_per_host(self, qi: HTTPQuery) -> None:
        human_label = f"{DB_LABEL} last row per host"
        human_desc = f"{human_label}: cpu"
        self.fill_in_query(qi, human_label, human_desc, LAST_POINT_PER_HOST_QUERY)

    def high_cpu_for_hosts(self, qi: HTTPQuery, n_hosts: int) -> None:
        """
        Readings where usage_user is above 90 for ``n_hosts`` hosts, or for
        every host when ``n_hosts`` is 0.
        """
        interval = self.interval.must_rand_window(devops.HIGH_CPU_DURATION)

        if n_hosts == devops.ALL_HOSTS:
            hosts_filter = ""
        else:
            hosts_filter = " and " + self.get_host_filter_clause(n_hosts)

        human_label = devops.get_high_cpu_label(DB_LABEL, n_hosts)
        human_desc = f"{human_label}: {interval.start_string()}"
        flux_query = HIGH_CPU_FOR_HOSTS_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "hosts": hosts_filter,
        }
        self.fill_in_query(qi, human_label, human_desc, flux_query)


def new_devops(
    start: datetime, end: datetime, scale: int, base: BaseGenerator
) -> Devops:
    return Devops(start, end, scale, base)
