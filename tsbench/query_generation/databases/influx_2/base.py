from __future__ import annotations

import logging
from datetime import datetime
from random import Random
from typing import TYPE_CHECKING, Optional

from tsbench import settings
from tsbench.query_generation.query import HTTPQuery

if TYPE_CHECKING:
    from tsbench.query_generation.databases.influx_2.devops import Devops
    from tsbench.query_generation.databases.influx_2.iot import IoT

logger = logging.getLogger("tsbench.query_generation.influx_2")

DB_LABEL = "Influx 2.x"


class BaseGenerator:
    """
    Holds what every Influx 2.x use case shares: the random source and the
    way a query record is allocated and filled in.
    """

    def __init__(self, random: Optional[Random] = None) -> None:
        self.random = random if random is not None else Random(settings.DEFAULT_SEED)

    def generate_empty_query(self) -> HTTPQuery:
        return HTTPQuery()

    def fill_in_query(
        self, qi: HTTPQuery, human_label: str, human_desc: str, flux_query: str
    ) -> None:
        raw_query = flux_query.encode("utf-8")
        qi.human_label = human_label.encode("utf-8")
        qi.human_description = human_desc.encode("utf-8")
        qi.method = settings.QUERY_METHOD.encode("utf-8")
        qi.path = settings.QUERY_PATH.encode("utf-8")
        qi.raw_query = raw_query
        qi.body = raw_query

    def new_devops(self, start: datetime, end: datetime, scale: int) -> Devops:
        from tsbench.query_generation.databases.influx_2.devops import new_devops

        logger.debug("Creating devops generator with scale %d", scale)
        return new_devops(start, end, scale, self)

    def new_iot(self, start: datetime, end: datetime, scale: int) -> IoT:
        from tsbench.query_generation.databases.influx_2.iot import new_iot

        logger.debug("Creating iot generator with scale %d", scale)
        return new_iot(start, end, scale, self)
