"""
Flat registry of the query generators: ``(format, use case)`` pairs map to
a factory building the generator, and every use case has a matrix of named
query types, each one a single call to one of the generator's templates.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from random import Random
from typing import Callable, Iterator, Mapping, Sequence, Tuple

from tsbench.environment import metrics as environment_metrics
from tsbench.query_generation.databases import influx_2
from tsbench.query_generation.exceptions import InvalidParameterError
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses import devops, iot
from tsbench.query_generation.uses.common import QueryGenerator
from tsbench.utils.metrics.wrapper import MetricsWrapper

logger = logging.getLogger("tsbench.query_generation")
metrics = MetricsWrapper(environment_metrics, "query_generation")

FORMAT_INFLUX_2 = "influx_2"

USE_CASE_DEVOPS = "devops"
USE_CASE_IOT = "iot"

GeneratorFactory = Callable[[datetime, datetime, int, Random], QueryGenerator]
QueryFiller = Callable[[QueryGenerator, HTTPQuery], None]


def _influx_2_devops(
    start: datetime, end: datetime, scale: int, random: Random
) -> QueryGenerator:
    return influx_2.BaseGenerator(random).new_devops(start, end, scale)


def _influx_2_iot(
    start: datetime, end: datetime, scale: int, random: Random
) -> QueryGenerator:
    return influx_2.BaseGenerator(random).new_iot(start, end, scale)


GENERATORS: Mapping[Tuple[str, str], GeneratorFactory] = {
    (FORMAT_INFLUX_2, USE_CASE_DEVOPS): _influx_2_devops,
    (FORMAT_INFLUX_2, USE_CASE_IOT): _influx_2_iot,
}


def _single_groupby(n_hosts: int, num_metrics: int, hours: int) -> QueryFiller:
    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        assert isinstance(generator, devops.DevopsGenerator)
        generator.group_by_time(qi, n_hosts, num_metrics, timedelta(hours=hours))

    return fill


def _max_all(n_hosts: int) -> QueryFiller:
    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        assert isinstance(generator, devops.DevopsGenerator)
        generator.max_all_cpu(qi, n_hosts, devops.MAX_ALL_DURATION)

    return fill


def _double_groupby(num_metrics: int) -> QueryFiller:
    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        assert isinstance(generator, devops.DevopsGenerator)
        generator.group_by_time_and_primary_tag(qi, num_metrics)

    return fill


def _high_cpu(n_hosts: int) -> QueryFiller:
    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        assert isinstance(generator, devops.DevopsGenerator)
        generator.high_cpu_for_hosts(qi, n_hosts)

    return fill


def _last_loc_by_truck(n_trucks: int) -> QueryFiller:
    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        assert isinstance(generator, iot.IoTGenerator)
        generator.last_loc_by_truck(qi, n_trucks)

    return fill


def _template(name: str) -> QueryFiller:
    """A template that takes nothing but the query to fill in."""

    def fill(generator: QueryGenerator, qi: HTTPQuery) -> None:
        getattr(generator, name)(qi)

    return fill


QUERY_TYPES: Mapping[str, Mapping[str, QueryFiller]] = {
    USE_CASE_DEVOPS: {
        f"{devops.LABEL_SINGLE_GROUPBY}-1-1-1": _single_groupby(1, 1, 1),
        f"{devops.LABEL_SINGLE_GROUPBY}-1-1-12": _single_groupby(1, 1, 12),
        f"{devops.LABEL_SINGLE_GROUPBY}-1-8-1": _single_groupby(1, 8, 1),
        f"{devops.LABEL_SINGLE_GROUPBY}-5-1-1": _single_groupby(5, 1, 1),
        f"{devops.LABEL_SINGLE_GROUPBY}-5-1-12": _single_groupby(5, 1, 12),
        f"{devops.LABEL_SINGLE_GROUPBY}-5-8-1": _single_groupby(5, 8, 1),
        f"{devops.LABEL_MAX_ALL}-1": _max_all(1),
        f"{devops.LABEL_MAX_ALL}-8": _max_all(8),
        f"{devops.LABEL_DOUBLE_GROUPBY}-1": _double_groupby(1),
        f"{devops.LABEL_DOUBLE_GROUPBY}-5": _double_groupby(5),
        f"{devops.LABEL_DOUBLE_GROUPBY}-all": _double_groupby(
            len(devops.CPU_METRICS)
        ),
        f"{devops.LABEL_HIGH_CPU}-all": _high_cpu(devops.ALL_HOSTS),
        f"{devops.LABEL_HIGH_CPU}-1": _high_cpu(1),
        devops.LABEL_LASTPOINT: _template("last_point_per_host"),
        devops.LABEL_GROUPBY_ORDERBY_LIMIT: _template("group_by_order_by_limit"),
    },
    USE_CASE_IOT: {
        iot.LABEL_LAST_LOC: _template("last_loc_per_truck"),
        iot.LABEL_LAST_LOC_SINGLE_TRUCK: _last_loc_by_truck(1),
        iot.LABEL_LOW_FUEL: _template("trucks_with_low_fuel"),
        iot.LABEL_HIGH_LOAD: _template("trucks_with_high_load"),
        iot.LABEL_STATIONARY_TRUCKS: _template("stationary_trucks"),
        iot.LABEL_LONG_DRIVING_SESSIONS: _template(
            "trucks_with_long_driving_sessions"
        ),
        iot.LABEL_LONG_DAILY_SESSIONS: _template("trucks_with_long_daily_sessions"),
        iot.LABEL_AVG_VS_PROJECTED_FUEL_CONSUMPTION: _template(
            "avg_vs_projected_fuel_consumption"
        ),
        iot.LABEL_AVG_DAILY_DRIVING_DURATION: _template("avg_daily_driving_duration"),
        iot.LABEL_AVG_DAILY_DRIVING_SESSION: _template("avg_daily_driving_session"),
        iot.LABEL_AVG_LOAD: _template("avg_load"),
        iot.LABEL_DAILY_ACTIVITY: _template("daily_truck_activity"),
        iot.LABEL_BREAKDOWN_FREQUENCY: _template("truck_breakdown_frequency"),
    },
}


def all_formats() -> Sequence[str]:
    return sorted({format for format, _ in GENERATORS})


def all_use_cases() -> Sequence[str]:
    return sorted(QUERY_TYPES)


def all_query_types(use_case: str) -> Sequence[str]:
    try:
        return sorted(QUERY_TYPES[use_case])
    except KeyError as error:
        raise InvalidParameterError(f"use case {use_case!r} does not exist") from error


def get_generator(
    format: str,
    use_case: str,
    start: datetime,
    end: datetime,
    scale: int,
    random: Random,
) -> QueryGenerator:
    try:
        factory = GENERATORS[(format, use_case)]
    except KeyError as error:
        raise InvalidParameterError(
            f"no generator for format {format!r} and use case {use_case!r}"
        ) from error
    return factory(start, end, scale, random)


def get_query_filler(use_case: str, query_type: str) -> QueryFiller:
    try:
        return QUERY_TYPES[use_case][query_type]
    except KeyError as error:
        raise InvalidParameterError(
            f"query type {query_type!r} does not exist for use case {use_case!r}"
        ) from error


def generate_queries(
    format: str,
    use_case: str,
    query_type: str,
    count: int,
    start: datetime,
    end: datetime,
    scale: int,
    random: Random,
) -> Iterator[HTTPQuery]:
    """
    Yield ``count`` filled queries of ``query_type`` numbered from 0. All of
    them come from a single generator so the random source keeps advancing
    from one query to the next.
    """
    if count < 0:
        raise InvalidParameterError(f"number of queries cannot be < 0; got {count}")

    fill = get_query_filler(use_case, query_type)
    generator = get_generator(format, use_case, start, end, scale, random)
    tags = {"use_case": use_case, "query_type": query_type}

    logger.info(
        "Generating %d %s queries for %s/%s", count, query_type, format, use_case
    )
    for query_id in range(count):
        started = time.perf_counter()
        qi = generator.generate_empty_query()
        fill(generator, qi)
        qi.id = query_id
        metrics.timing(
            "queries.generation_time", (time.perf_counter() - started) * 1000, tags
        )
        metrics.increment("queries.generated", tags=tags)
        yield qi
