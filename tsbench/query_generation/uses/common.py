from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from random import Random
from typing import Sequence

from tsbench.query_generation.exceptions import InvalidParameterError
from tsbench.query_generation.query import HTTPQuery
from tsbench.query_generation.time_interval import TimeInterval


class Core:
    """
    State shared by every use case: the simulation interval, the number of
    simulated entities and the random source all samplers draw from.
    """

    # what the sampled entities are called, e.g. "host" -> host_1 .. host_S
    entity: str

    def __init__(self, start: datetime, end: datetime, scale: int, random: Random) -> None:
        if scale < 1:
            raise InvalidParameterError(f"scale cannot be < 1; got {scale}")
        self.interval = TimeInterval(start, end, random)
        self.scale = scale
        self.random = random

    def get_random_entities(self, n: int) -> Sequence[str]:
        """
        Pick ``n`` distinct entity names out of ``<entity>_1 .. <entity>_<scale>``.
        Names are returned in the order they were drawn.
        """
        if n < 1:
            raise InvalidParameterError(
                f"number of {self.entity}s cannot be < 1; got {n}"
            )
        if n > self.scale:
            raise InvalidParameterError(
                f"number of {self.entity}s ({n}) larger than total {self.entity}s. See --scale ({self.scale})"
            )

        return [
            f"{self.entity}_{index}"
            for index in self.random.sample(range(1, self.scale + 1), n)
        ]


class QueryGenerator(ABC):
    """Something that can allocate the empty records its templates fill in."""

    @abstractmethod
    def generate_empty_query(self) -> HTTPQuery:
        raise NotImplementedError
