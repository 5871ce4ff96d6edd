from __future__ import annotations

from abc import abstractmethod
from datetime import timedelta
from typing import Sequence

from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.uses.common import Core as BaseCore
from tsbench.query_generation.uses.common import QueryGenerator

STATIONARY_DURATION = timedelta(minutes=10)
LONG_DRIVING_SESSION_DURATION = timedelta(hours=4)
DAILY_DRIVING_DURATION = timedelta(hours=24)

FLEETS: Sequence[str] = ("East", "West", "North", "South")

LABEL_LAST_LOC = "last-loc"
LABEL_LAST_LOC_SINGLE_TRUCK = "single-last-loc"
LABEL_LOW_FUEL = "low-fuel"
LABEL_HIGH_LOAD = "high-load"
LABEL_STATIONARY_TRUCKS = "stationary-trucks"
LABEL_LONG_DRIVING_SESSIONS = "long-driving-sessions"
LABEL_LONG_DAILY_SESSIONS = "long-daily-sessions"
LABEL_AVG_VS_PROJECTED_FUEL_CONSUMPTION = "avg-vs-projected-fuel-consumption"
LABEL_AVG_DAILY_DRIVING_DURATION = "avg-daily-driving-duration"
LABEL_AVG_DAILY_DRIVING_SESSION = "avg-daily-driving-session"
LABEL_AVG_LOAD = "avg-load"
LABEL_DAILY_ACTIVITY = "daily-activity"
LABEL_BREAKDOWN_FREQUENCY = "breakdown-frequency"


class Core(BaseCore):
    """IoT use case: a fleet of trucks reporting readings and diagnostics."""

    entity = "truck"

    def get_random_trucks(self, n: int) -> Sequence[str]:
        return self.get_random_entities(n)

    def get_random_fleet(self) -> str:
        return self.random.choice(FLEETS)


class IoTGenerator(QueryGenerator):
    """The queries every iot generator knows how to emit."""

    @abstractmethod
    def last_loc_by_truck(self, qi: HTTPQuery, n_trucks: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def last_loc_per_truck(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def trucks_with_low_fuel(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def trucks_with_high_load(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def stationary_trucks(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def trucks_with_long_driving_sessions(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def trucks_with_long_daily_sessions(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def avg_vs_projected_fuel_consumption(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def avg_daily_driving_duration(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def avg_daily_driving_session(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def avg_load(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def daily_truck_activity(self, qi: HTTPQuery) -> None:
        raise NotImplementedError

    @abstractmethod
    def truck_breakdown_frequency(self, qi: HTTPQuery) -> None:
        raise NotImplementedError
