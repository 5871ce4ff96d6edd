from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Sequence

from tsbench.query_generation.databases.influx_2.base import DB_LABEL, BaseGenerator
from tsbench.query_generation.databases.influx_2.filters import tag_filter_clause
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses import iot
from tsbench.utils.durations import duration_nanoseconds

LAST_LOC_BY_TRUCK_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and %(trucks)s)\n'
    '\t|> pivot(rowKey:["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
    '\t|> group(columns: ["name", "driver"])\n'
    '\t|> sort(columns: ["_time"], desc: true)\n'
    '\t|> first(column: "latitude")\n'
    '\t|> keep(columns: ["name", "driver", "latitude", "longitude", "_time"])'
)

LAST_LOC_PER_TRUCK_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and r.fleet == "%(fleet)s")\n'
    '\t|> pivot(rowKey:["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
    '\t|> group(columns: ["name", "driver"])\n'
    '\t|> sort(columns: ["_time"], desc: true)\n'
    '\t|> first(column: "latitude")\n'
    '\t|> keep(columns: ["name", "driver", "latitude", "longitude"])'
)

TRUCKS_WITH_LOW_FUEL_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "diagnostics" and r.fleet == "%(fleet)s" and r._field == "fuel_state" and r._value <= 0.1)\n'
    '\t|> group(columns: ["name", "driver"])\n'
    "\t|> last()\n"
    '\t|> keep(columns: ["name", "driver", "_field", "_value"])'
)

TRUCKS_WITH_HIGH_LOAD_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "diagnostics" and r.fleet == "%(fleet)s")\n'
    '\t|> pivot(rowKey:["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
    '\t|> group(columns: ["name", "driver"])\n'
    '\t|> sort(columns: ["_time"], desc: true)\n'
    '\t|> first(column: "current_load")\n'
    "\t|> filter(fn: (r) => r.current_load >= 0.9 * r.load_capacity)\n"
    '\t|> keep(columns: ["name", "driver", "current_load", "load_capacity"])'
)

STATIONARY_TRUCKS_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and r._field == "velocity" and r.fleet == "%(fleet)s")\n'
    '\t|> group(columns: ["name", "driver", "fleet"])\n'
    "\t|> aggregateWindow(every: 10m, fn: mean, createEmpty: false)\n"
    '\t|> sort(columns: ["_time"], desc: false)\n'
    "\t|> filter(fn: (r) => r._value < 1.0)"
)

# shared by the long driving session and long daily session queries
LONG_SESSIONS_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and r._field == "velocity" and r.fleet == "%(fleet)s")\n'
    "\t|> aggregateWindow(every: 10m, fn: mean, createEmpty: false)\n"
    '\t|> group(columns: ["name", "driver"])\n'
    "\t|> filter(fn: (r) => r._value > 1.0)\n"
    "\t|> aggregateWindow(every: %(every)ds, fn:count, offset: %(offset)ds, createEmpty: false)\n"
    "\t|> filter(fn: (r) => r._value > %(threshold)d)\n"
    "\t"
)

AVG_VS_PROJECTED_FUEL_CONSUMPTION_QUERY = (
    "\n"
    '\tdata = from(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and exists r.fleet)\n'
    '\t|> filter(fn: (r) => r._field == "velocity" or r._field == "fuel_consumption" or r._field == "nominal_fuel_consumption")\n'
    '\t|> pivot(rowKey:["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
    "\t|> filter(fn: (r) => r.velocity > 1.0)\n"
    '\t|> group(columns: ["fleet"])\n'
    "\n"
    "\tdata\n"
    '\t|> mean(column: "nominal_fuel_consumption")\n'
    '\t|> yield(name: "mean_nominal_fuel_consumption")\n'
    "\n"
    "\tdata\n"
    '\t|> mean(column: "fuel_consumption")\n'
    '\t|> yield(name: "mean_fuel_consumption")'
)

AVG_DAILY_DRIVING_DURATION_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings" and r._field == "velocity")\n'
    '\t|> group(columns: ["fleet", "name", "driver"])\n'
    "\t|> aggregateWindow(every: 10m, fn: mean, createEmpty: false)\n"
    "\t|> filter(fn: (r) => r._value > 1.0)\n"
    '\t|> sort(columns: ["_time"], desc: false)\n'
    "\t|> aggregateWindow(every: 1d, fn: count, createEmpty: false)\n"
    "\t|> map(fn: (r) => ({r with _value: r._value / 6.0}))\n"
    '\t|> group(columns: ["fleet", "name", "driver"])\n'
    '\t|> yield(name: "hours_driven")\n'
    "\t"
)

AVG_DAILY_DRIVING_SESSION_QUERY = (
    "\n"
    '\timport "date"\n'
    '\timport "math"\n'
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "readings")\n'
    '\t|> filter(fn: (r) => r._field == "velocity")\n'
    '\t|> group(columns: ["fleet", "name", "driver"]) \n'
    "\t|> aggregateWindow(every: 10m, fn: mean, createEmpty: false)\n"
    "\t|> map(fn: (r) => ({r with driving: if r._value > 5.0 then 1 else 0}))\n"
    "\t|> map(fn: (r) => ({r with day: date.yearDay(t: r._time)}))\n"
    "\t|> map(fn: (r) => ({r with year: date.year(t: r._time)}))\n"
    "\t|> map(fn: (r) => ({r with month: date.month(t: r._time)}))\n"
    '\t|> group(columns: ["fleet", "name", "driver", "year", "day"]) \n'
    "\t|> reduce(\n"
    "\t\tidentity: {\n"
    "\t\t\tcurrSession: 0,\n"
    "\t\t\tsessionSum: 0,\n"
    "\t\t\tsessionCount: 0,\n"
    "\t\t\tlastState: -1,\n"
    "\t\t\tfstDate: 0\n"
    "\t\t},\n"
    "\t\tfn: (r, accumulator) => ({\n"
    "\t\t\tlastState: r.driving,\n"
    "\t\t\tcurrSession: if (r.driving == 1 and r.driving == accumulator.lastState) then accumulator.currSession + 1 else 0,\n"
    "\t\t\tsessionSum: if (r.driving == 1 and r.driving == accumulator.lastState) then accumulator.sessionSum else accumulator.sessionSum + accumulator.currSession,\n"
    "\t\t\tsessionCount: if (r.driving == 1 and r.driving == accumulator.lastState) then accumulator.sessionCount else accumulator.sessionCount + 1,\n"
    "\t\t\tfstDate: if accumulator.fstDate == 0 then int(v: r._time) else accumulator.fstDate \n"
    "\t\t})\n"
    "\t)\n"
    "\t|> map(fn: (r) => ({\n"
    "\t\tname: r.name,\n"
    "\t\tdriver: r.driver,\n"
    "\t\tfleet: r.fleet,\n"
    "\t\tavg_session: (float(v:(r.sessionSum + r.currSession)) * 10.0 / float(v: r.sessionCount)) / 60.0,\n"
    "\t\t_time: time(v: r.fstDate)\n"
    "\t}))\n"
    "\t|> yield()"
)

AVG_LOAD_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: 0)\n"
    '\t|> filter(fn: (r) => r._measurement == "diagnostics")\n'
    '\t|> filter(fn: (r) => r._field == "current_load" or r._field == "load_capacity")\n'
    '\t|> pivot(rowKey:["_time"], columnKey: ["_field"], valueColumn: "_value")\n'
    "\t|> filter(fn: (r) => r.load_capacity > 0.0)\n"
    "\t|> map(fn: (r) => ({r with load_percentage: r.current_load / r.load_capacity}))\n"
    '\t|> group(columns: ["name", "fleet", "model"])\n'
    '\t|> mean(column: "load_percentage")'
)

DAILY_TRUCK_ACTIVITY_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "diagnostics" and r._field == "status")\n'
    "\t|> filter(fn: (r) => exists r.model and exists r.fleet)\n"
    "\t|> aggregateWindow(every: 10m, fn: mean, createEmpty: false)\n"
    '\t|> group(columns: ["model", "fleet"])\n'
    "\t|> filter(fn: (r) => r._value < 1)\n"
    "\t|> aggregateWindow(every: 1d, fn: count, createEmpty: false)\n"
    "\t|> map(fn: (r) => ({r with _value: float(v:r._value) / 144.0}))"
)

TRUCK_BREAKDOWN_FREQUENCY_QUERY = (
    "\n"
    '\tfrom(bucket: "benchmark")\n'
    "\t|> range(start: %(start)s, stop: %(end)s)\n"
    '\t|> filter(fn: (r) => r._measurement == "diagnostics" and r._field == "status")\n'
    "\t|> filter(fn: (r) => exists r.model and exists r.fleet)\n"
    "\t// First mark each reading as broken (1) or not (0)\n"
    "\t|> map(fn: (r) => ({r with is_broken: if r._value == 0 then 1 else 0})) \n"
    '\t|> group(columns: ["model"])\n'
    "\t|> aggregateWindow(\n"
    "\t\tevery: 10m,\n"
    "\t\tfn: (column, tables=<-) => tables\n"
    '\t\t|> mean(column: "is_broken")\n'
    "\t\t|> map(fn: (r) => ({r with broken_down: if r.is_broken >= 0.5 then true else false})),\n"
    "\t)\n"
    '\t|> sort(columns: ["_time"])\n'
    "\t|> reduce(\n"
    "\t\tidentity: {\n"
    "\t\t\tlastState: -1,\n"
    "\t\t\tcnt: 0\n"
    "\t\t}, \n"
    "\t\tfn: (r, accumulator) => ({\n"
    "\t\t\tlastState: if r.broken_down == true then 1 else 0,\n"
    "\t\t\tcnt: if accumulator.lastState == 0 and r.broken_down == true then accumulator.cnt + 1 else accumulator.cnt\n"
    "\t\t}) \n"
    "\t)"
)


def ten_minute_periods(minutes_per_hour: float, duration: timedelta) -> int:
    """
    Number of 10 minute periods that fit in ``duration`` once
    ``minutes_per_hour`` minutes are taken out of every hour, e.g. 4 hours
    less 5 minutes per hour leave 3h40m, that is 22 periods.
    """
    duration_minutes = duration.total_seconds() / 60
    leftover = minutes_per_hour * duration.total_seconds() / 3600
    return math.floor((duration_minutes - leftover) / 10)


class IoT(iot.Core, iot.IoTGenerator):
    """Influx 2.x flavoured queries for every iot query type."""

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

    def get_truck_filter_clause_with_names(self, names: Sequence[str]) -> str:
        return tag_filter_clause("name", names)

    def get_trucks_filter_clause(self, n_trucks: int) -> str:
        return self.get_truck_filter_clause_with_names(self.get_random_trucks(n_trucks))

    def __interval_offset_seconds(self) -> int:
        # aggregateWindow offset, aligned on the start of the simulation
        start = self.interval.start
        return start.hour * 3600 + start.minute * 60 + start.second

    def last_loc_by_truck(self, qi: HTTPQuery, n_trucks: int) -> None:
        flux_query = LAST_LOC_BY_TRUCK_QUERY % {
            "trucks": self.get_trucks_filter_clause(n_trucks)
        }

        human_label = f"{DB_LABEL} last location by specific truck"
        human_desc = f"{human_label}: random {n_trucks:4d} trucks"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def last_loc_per_truck(self, qi: HTTPQuery) -> None:
        flux_query = LAST_LOC_PER_TRUCK_QUERY % {"fleet": self.get_random_fleet()}

        human_label = f"{DB_LABEL} last location per truck"
        self.fill_in_query(qi, human_label, human_label, flux_query)

    def trucks_with_low_fuel(self, qi: HTTPQuery) -> None:
        flux_query = TRUCKS_WITH_LOW_FUEL_QUERY % {"fleet": self.get_random_fleet()}

        human_label = f"{DB_LABEL} trucks with low fuel"
        human_desc = f"{human_label}: under 10 percent"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def trucks_with_high_load(self, qi: HTTPQuery) -> None:
        flux_query = TRUCKS_WITH_HIGH_LOAD_QUERY % {"fleet": self.get_random_fleet()}

        human_label = f"{DB_LABEL} trucks with high load"
        human_desc = f"{human_label}: over 90 percent"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def stationary_trucks(self, qi: HTTPQuery) -> None:
        """Trucks with a low average velocity in a random 10 minute window."""
        interval = self.interval.must_rand_window(iot.STATIONARY_DURATION)
        flux_query = STATIONARY_TRUCKS_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "fleet": self.get_random_fleet(),
        }

        human_label = f"{DB_LABEL} stationary trucks"
        human_desc = f"{human_label}: with low avg velocity in last 10 minutes"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def trucks_with_long_driving_sessions(self, qi: HTTPQuery) -> None:
        """Trucks that did not stop for 20 minutes in a random 4 hour window."""
        interval = self.interval.must_rand_window(iot.LONG_DRIVING_SESSION_DURATION)
        flux_query = LONG_SESSIONS_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "fleet": self.get_random_fleet(),
            # the nanosecond count carries an "s" unit in the emitted text
            "every": duration_nanoseconds(iot.LONG_DRIVING_SESSION_DURATION),
            "offset": self.__interval_offset_seconds(),
            # driving limit if the driver rests 5 minutes per hour
            "threshold": ten_minute_periods(5, iot.LONG_DRIVING_SESSION_DURATION),
        }

        human_label = f"{DB_LABEL} trucks with longer driving sessions"
        human_desc = f"{human_label}: stopped less than 20 mins in 4 hour period"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def trucks_with_long_daily_sessions(self, qi: HTTPQuery) -> None:
        """Trucks that drove more than 10 hours in a random 24 hour window."""
        interval = self.interval.must_rand_window(iot.DAILY_DRIVING_DURATION)
        flux_query = LONG_SESSIONS_QUERY % {
            "start": interval.start_string(),
            "end": interval.end_string(),
            "fleet": self.get_random_fleet(),
            "every": duration_nanoseconds(iot.LONG_DRIVING_SESSION_DURATION),
            "offset": self.__interval_offset_seconds(),
            "threshold": ten_minute_periods(35, iot.DAILY_DRIVING_DURATION),
        }

        human_label = f"{DB_LABEL} trucks with longer daily sessions"
        human_desc = f"{human_label}: drove more than 10 hours in the last 24 hours"
        self.fill_in_query(qi, human_label, human_desc, flux_query)

    def avg_vs_projected_fuel_consumption(self, qi: HTTPQuery) -> None:
        human_label = f"{DB_LABEL} average vs projected fuel consumption per fleet"
        self.fill_in_query(
            qi, human_label, human_label, AVG_VS_PROJECTED_FUEL_CONSUMPTION_QUERY
        )

    def avg_daily_driving_duration(self, qi: HTTPQuery) -> None:
        flux_query = AVG_DAILY_DRIVING_DURATION_QUERY % {
            "start": self.interval.start_string(),
            "end": self.interval.end_string(),
        }

        human_label = f"{DB_LABEL} average driver driving duration per day"
        self.fill_in_query(qi, human_label, human_label, flux_query)

    def avg_daily_driving_session(self, qi: HTTPQuery) -> None:
        flux_query = AVG_DAILY_DRIVING_SESSION_QUERY % {
            "start": self.interval.start_string(),
            "end": self.interval.end_string(),
        }

        human_label = (
            f"{DB_LABEL} average driver driving session without stopping per day"
        )
        self.fill_in_query(qi, human_label, human_label, flux_query)

    def avg_load(self, qi: HTTPQuery) -> None:
        human_label = f"{DB_LABEL} average load per truck model per fleet"
        self.fill_in_query(qi, human_label, human_label, AVG_LOAD_QUERY)

    def daily_truck_activity(self, qi: HTTPQuery) -> None:
        """Hours per day trucks were not out of commission, per fleet and model."""
        flux_query = DAILY_TRUCK_ACTIVITY_QUERY % {
            "start": self.interval.start_string(),
            "end": self.interval.end_string(),
        }

        human_label = f"{DB_LABEL} daily truck activity per fleet per model"
        self.fill_in_query(qi, human_label, human_label, flux_query)

    def truck_breakdown_frequency(self, qi: HTTPQuery) -> None:
        """How many times trucks of each model broke down over the interval."""
        flux_query = TRUCK_BREAKDOWN_FREQUENCY_QUERY % {
            "start": self.interval.start_string(),
            "end": self.interval.end_string(),
        }

        human_label = f"{DB_LABEL} truck breakdown frequency per model"
        self.fill_in_query(qi, human_label, human_label, flux_query)


def new_iot(start: datetime, end: datetime, scale: int, base: BaseGenerator) -> IoT:
    return IoT(start, end, scale, base)
