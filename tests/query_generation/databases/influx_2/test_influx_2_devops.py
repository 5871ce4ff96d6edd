import re
from datetime import datetime, timedelta, timezone
from random import Random
from typing import Sequence

import pytest

from tsbench.query_generation.databases.influx_2 import BaseGenerator, Devops
from tsbench.query_generation.exceptions import InvalidParameterError
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses import devops

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
SCALE = 10

ALL_CPU_FIELDS = (
    "(r._field == 'usage_user' or r._field == 'usage_system' or "
    "r._field == 'usage_idle' or r._field == 'usage_nice' or "
    "r._field == 'usage_iowait' or r._field == 'usage_irq' or "
    "r._field == 'usage_softirq' or r._field == 'usage_steal' or "
    "r._field == 'usage_guest' or r._field == 'usage_guest_nice')"
)
FIVE_HOSTS = (
    "(r.hostname == 'host_9' or r.hostname == 'host_5' or "
    "r.hostname == 'host_1' or r.hostname == 'host_7' or "
    "r.hostname == 'host_2')"
)

RANGE_RE = re.compile(r"range\(start: (\S+), stop: (\S+)\)")


def flux(*lines: str) -> str:
    return "\n" + "".join(f"\t{line}\n" for line in lines) + "\t"


def build_devops(
    random: Random, duration: timedelta = timedelta(hours=1)
) -> Devops:
    return BaseGenerator(random).new_devops(EPOCH, EPOCH + duration, SCALE)


def assert_query(
    qi: HTTPQuery, human_label: str, human_desc: str, flux_query: str
) -> None:
    assert qi.human_label.decode("utf-8") == human_label
    assert qi.human_description.decode("utf-8") == human_desc
    assert qi.method == b"POST"
    assert qi.path == b"/api/v2/query"
    assert qi.raw_query.decode("utf-8") == flux_query
    assert qi.body == qi.raw_query


def query_range(qi: HTTPQuery) -> Sequence[datetime]:
    match = RANGE_RE.search(qi.body.decode("utf-8"))
    assert match is not None
    return [
        datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=timezone.utc)
        for value in match.groups()
    ]


@pytest.mark.parametrize(
    "hostnames, expected",
    [
        pytest.param(["foo1"], "(r.hostname == 'foo1')", id="single host"),
        pytest.param(
            ["foo1", "foo2"],
            "(r.hostname == 'foo1' or r.hostname == 'foo2')",
            id="multi host (2)",
        ),
        pytest.param(
            ["foo1", "foo2", "foo3"],
            "(r.hostname == 'foo1' or r.hostname == 'foo2' or r.hostname == 'foo3')",
            id="multi host (3)",
        ),
    ],
)
def test_host_filter_clause_with_hostnames(
    hostnames: Sequence[str], expected: str
) -> None:
    d = build_devops(Random(123))
    assert d.get_host_filter_clause_with_hostnames(hostnames) == expected


@pytest.mark.parametrize(
    "n_hosts, sample, expected",
    [
        pytest.param(1, [1], "(r.hostname == 'host_1')", id="single host"),
        pytest.param(
            2,
            [7, 9],
            "(r.hostname == 'host_7' or r.hostname == 'host_9')",
            id="multi host (2)",
        ),
        pytest.param(
            3,
            [1, 8, 5],
            "(r.hostname == 'host_1' or r.hostname == 'host_8' or r.hostname == 'host_5')",
            id="multi host (3)",
        ),
    ],
)
def test_host_filter_clause(
    scripted_random, n_hosts: int, sample: Sequence[int], expected: str
) -> None:
    random = scripted_random(samples=[sample])
    d = build_devops(random)

    assert d.get_host_filter_clause(n_hosts) == expected
    random.sample.assert_called_once_with(range(1, SCALE + 1), n_hosts)


def test_group_by_time(scripted_random) -> None:
    random = scripted_random(offsets=[358], samples=[[9]])
    d = build_devops(random)

    qi = d.generate_empty_query()
    d.group_by_time(qi, 1, 1, timedelta(seconds=1))

    assert_query(
        qi,
        "Influx 2.x 1 cpu metric(s), random    1 hosts, random 1s by 1m",
        "Influx 2.x 1 cpu metric(s), random    1 hosts, random 1s by 1m: 1970-01-01T00:05:58Z",
        flux(
            'from(bucket: "benchmark") ',
            "|> range(start: 1970-01-01T00:05:58Z, stop: 1970-01-01T00:05:59Z)",
            "|> filter(fn: (r) => r._measurement == \"cpu\" and (r._field == 'usage_user') and (r.hostname == 'host_9'))",
            "|> aggregateWindow(every: 1m, fn: max, createEmpty: false)",
            "|> yield()",
        ),
    )
    random.randint.assert_called_once_with(0, 3599 * 10**9)


def test_group_by_order_by_limit(scripted_random) -> None:
    d = build_devops(scripted_random(offsets=[982]), timedelta(hours=2))

    qi = d.generate_empty_query()
    d.group_by_order_by_limit(qi)

    assert_query(
        qi,
        "Influx 2.x max cpu over last 5 min-intervals (random end)",
        "Influx 2.x max cpu over last 5 min-intervals (random end): 1970-01-01T00:16:22Z",
        flux(
            'from(bucket: "benchmark")',
            "|> range(start: 0, stop: 1970-01-01T01:16:22Z)",
            '|> filter(fn: (r) => r._measurement == "cpu" and r._field == "usage_user")',
            "|> aggregateWindow(every: 1m, fn: max)",
            '|> sort(columns: ["_time"], desc: true)',
            "|> limit(n: 5)",
        ),
    )


@pytest.mark.parametrize(
    "num_metrics, offset, start, end, fields",
    [
        pytest.param(
            1,
            982,
            "1970-01-01T00:16:22Z",
            "1970-01-01T12:16:22Z",
            "(r._field == 'usage_user')",
            id="1 metric",
        ),
        pytest.param(
            5,
            3250,
            "1970-01-01T00:54:10Z",
            "1970-01-01T12:54:10Z",
            "(r._field == 'usage_user' or r._field == 'usage_system' or "
            "r._field == 'usage_idle' or r._field == 'usage_nice' or "
            "r._field == 'usage_iowait')",
            id="5 metrics",
        ),
    ],
)
def test_group_by_time_and_primary_tag(
    scripted_random, num_metrics: int, offset: int, start: str, end: str, fields: str
) -> None:
    d = build_devops(
        scripted_random(offsets=[offset]),
        devops.DOUBLE_GROUP_BY_DURATION + timedelta(hours=1),
    )

    qi = d.generate_empty_query()
    d.group_by_time_and_primary_tag(qi, num_metrics)

    label = f"Influx 2.x mean of {num_metrics} metrics, all hosts, random 12h0m0s by 1h"
    assert_query(
        qi,
        label,
        f"{label}: {start}",
        flux(
            'from(bucket: "benchmark")',
            f"|> range(start: {start}, stop: {end})",
            f'|> filter(fn: (r) => r._measurement == "cpu" and {fields})',
            '|> group(columns: ["_time", "hostname"])',
            "|> aggregateWindow(every: 1h, fn: mean)",
            '|> yield(name: "mean")',
        ),
    )


def test_group_by_time_and_primary_tag_without_metrics(scripted_random) -> None:
    random = scripted_random()
    d = build_devops(random, devops.DOUBLE_GROUP_BY_DURATION + timedelta(hours=1))

    with pytest.raises(InvalidParameterError, match="^cannot get 0 metrics$"):
        d.group_by_time_and_primary_tag(d.generate_empty_query(), 0)
    random.randint.assert_not_called()


@pytest.mark.parametrize(
    "n_hosts, offset, sample, start, end, hosts",
    [
        pytest.param(
            1,
            3250,
            [3],
            "1970-01-01T00:54:10Z",
            "1970-01-01T08:54:10Z",
            "(r.hostname == 'host_3')",
            id="1 host",
        ),
        pytest.param(
            5,
            2232,
            [9, 5, 1, 7, 2],
            "1970-01-01T00:37:12Z",
            "1970-01-01T08:37:12Z",
            FIVE_HOSTS,
            id="5 hosts",
        ),
    ],
)
def test_max_all_cpu(
    scripted_random,
    n_hosts: int,
    offset: int,
    sample: Sequence[int],
    start: str,
    end: str,
    hosts: str,
) -> None:
    d = build_devops(
        scripted_random(offsets=[offset], samples=[sample]),
        devops.MAX_ALL_DURATION + timedelta(hours=1),
    )

    qi = d.generate_empty_query()
    d.max_all_cpu(qi, n_hosts, devops.MAX_ALL_DURATION)

    label = f"Influx 2.x max of all CPU metrics, random {n_hosts:4d} hosts, random 8h0m0s by 1h"
    assert_query(
        qi,
        label,
        f"{label}: {start}",
        flux(
            'from(bucket: "benchmark")',
            f"|> range(start: {start}, stop: {end})",
            f'|> filter(fn: (r) => r._measurement == "cpu" and {ALL_CPU_FIELDS} and {hosts})',
            "|> aggregateWindow(every: 1h, fn: max)",
            '|> yield(name: "max")',
        ),
    )


def test_max_all_cpu_without_hosts(scripted_random) -> None:
    d = build_devops(
        scripted_random(offsets=[3250]),
        devops.MAX_ALL_DURATION + timedelta(hours=1),
    )

    with pytest.raises(
        InvalidParameterError, match="^number of hosts cannot be < 1; got 0$"
    ):
        d.max_all_cpu(d.generate_empty_query(), 0, devops.MAX_ALL_DURATION)


def test_last_point_per_host(scripted_random) -> None:
    random = scripted_random()
    d = build_devops(random, timedelta(hours=2))

    qi = d.generate_empty_query()
    d.last_point_per_host(qi)

    assert_query(
        qi,
        "Influx 2.x last row per host",
        "Influx 2.x last row per host: cpu",
        flux(
            'from(bucket: "benchmark")',
            "|> range(start: 0)",
            '|> filter(fn: (r) => r._measurement == "cpu")',
            '|> group(columns: ["hostname"])',
            "|> last()",
        ),
    )
    assert random.mock_calls == []


@pytest.mark.parametrize(
    "n_hosts, offset, samples, label, start, end, hosts",
    [
        pytest.param(
            0,
            3250,
            [],
            "Influx 2.x CPU over threshold, all hosts",
            "1970-01-01T00:54:10Z",
            "1970-01-01T12:54:10Z",
            "",
            id="zero hosts",
        ),
        pytest.param(
            1,
            2850,
            [[5]],
            "Influx 2.x CPU over threshold, 1 host(s)",
            "1970-01-01T00:47:30Z",
            "1970-01-01T12:47:30Z",
            " and (r.hostname == 'host_5')",
            id="1 host",
        ),
        pytest.param(
            5,
            1065,
            [[9, 5, 1, 7, 2]],
            "Influx 2.x CPU over threshold, 5 host(s)",
            "1970-01-01T00:17:45Z",
            "1970-01-01T12:17:45Z",
            f" and {FIVE_HOSTS}",
            id="5 hosts",
        ),
    ],
)
def test_high_cpu_for_hosts(
    scripted_random,
    n_hosts: int,
    offset: int,
    samples: Sequence[Sequence[int]],
    label: str,
    start: str,
    end: str,
    hosts: str,
) -> None:
    d = build_devops(
        scripted_random(offsets=[offset], samples=samples),
        devops.HIGH_CPU_DURATION + timedelta(hours=1),
    )

    qi = d.generate_empty_query()
    d.high_cpu_for_hosts(qi, n_hosts)

    assert_query(
        qi,
        label,
        f"{label}: {start}",
        flux(
            'from(bucket: "benchmark")',
            f"|> range(start: {start}, stop: {end})",
            f'|> filter(fn: (r) => r._measurement == "cpu" and r._field == "usage_user" and r._value > 90.0{hosts})',
            '|> yield(name: "high_cpu")',
        ),
    )


def test_high_cpu_for_negative_hosts(scripted_random) -> None:
    d = build_devops(
        scripted_random(offsets=[3250]),
        devops.HIGH_CPU_DURATION + timedelta(hours=1),
    )

    with pytest.raises(
        InvalidParameterError, match="^number of hosts cannot be < 1; got -1$"
    ):
        d.high_cpu_for_hosts(d.generate_empty_query(), -1)


def test_fill_in_query() -> None:
    d = build_devops(Random(123))
    qi = d.generate_empty_query()

    d.fill_in_query(
        qi,
        "this is my label",
        "and now my description",
        "SELECT * from cpu where usage_user > 90.0 and time < '2017-01-01'",
    )
    assert_query(
        qi,
        "this is my label",
        "and now my description",
        "SELECT * from cpu where usage_user > 90.0 and time < '2017-01-01'",
    )


def test_too_many_hosts(seeded_random: Random) -> None:
    d = build_devops(seeded_random)

    with pytest.raises(InvalidParameterError) as error:
        d.group_by_time(d.generate_empty_query(), SCALE + 1, 1, timedelta(minutes=5))
    assert (
        error.value.message
        == "number of hosts (11) larger than total hosts. See --scale (10)"
    )


def test_too_many_metrics(seeded_random: Random) -> None:
    d = build_devops(seeded_random)

    with pytest.raises(InvalidParameterError, match="^too many metrics asked for$"):
        d.group_by_time(d.generate_empty_query(), 1, 11, timedelta(minutes=5))


def test_window_larger_than_interval(seeded_random: Random) -> None:
    d = build_devops(seeded_random)

    with pytest.raises(InvalidParameterError) as error:
        d.max_all_cpu(d.generate_empty_query(), 1, devops.MAX_ALL_DURATION)
    assert (
        str(error.value)
        == "random window larger than TimeInterval: window 8h0m0s, interval 1h0m0s"
    )


def _render_all(d: Devops) -> Sequence[bytes]:
    queries = []
    for _ in range(5):
        for fill in (
            lambda qi: d.group_by_time(qi, 5, 8, timedelta(hours=1)),
            lambda qi: d.group_by_order_by_limit(qi),
            lambda qi: d.group_by_time_and_primary_tag(qi, 5),
            lambda qi: d.max_all_cpu(qi, 8, devops.MAX_ALL_DURATION),
            lambda qi: d.high_cpu_for_hosts(qi, 1),
        ):
            qi = d.generate_empty_query()
            fill(qi)
            queries.append(qi.body)
    return queries


def test_same_seed_same_queries() -> None:
    first = _render_all(build_devops(Random(42), timedelta(days=1)))
    second = _render_all(build_devops(Random(42), timedelta(days=1)))
    other = _render_all(build_devops(Random(43), timedelta(days=1)))

    assert first == second
    assert first != other


@pytest.mark.parametrize(
    "n_hosts, window",
    [
        (devops.ALL_HOSTS, devops.HIGH_CPU_DURATION),
        (1, devops.HIGH_CPU_DURATION),
        (SCALE, devops.HIGH_CPU_DURATION),
    ],
)
def test_high_cpu_windows_stay_inside_interval(
    seeded_random: Random, n_hosts: int, window: timedelta
) -> None:
    span = timedelta(hours=13, minutes=17, seconds=3)
    d = build_devops(seeded_random, span)

    for _ in range(50):
        qi = d.generate_empty_query()
        d.high_cpu_for_hosts(qi, n_hosts)
        start, end = query_range(qi)
        assert end - start == window
        assert EPOCH <= start
        assert end <= EPOCH + span

        body = qi.body.decode("utf-8")
        hostnames = re.findall(r"r\.hostname == '(host_\d+)'", body)
        assert len(hostnames) == n_hosts
        assert len(set(hostnames)) == n_hosts


def test_sampling_draws_distinct_hosts(seeded_random: Random) -> None:
    d = build_devops(seeded_random)

    for _ in range(100):
        hosts = d.get_random_hosts(SCALE)
        assert sorted(hosts, key=lambda host: int(host[5:])) == [
            f"host_{i}" for i in range(1, SCALE + 1)
        ]


def test_generator_random_defaults_to_seed() -> None:
    base = BaseGenerator()
    assert base.random.random() == Random(123).random()
