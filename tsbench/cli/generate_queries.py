import sys
import time
from datetime import datetime, timezone
from random import Random
from typing import IO, Any, Optional

import click
import structlog

from tsbench import settings
from tsbench.environment import setup_logging
from tsbench.query_generation.factory import (
    FORMAT_INFLUX_2,
    all_formats,
    all_use_cases,
    generate_queries as generate,
)
from tsbench.query_generation.writer import QueryWriter
from tsbench.utils.serializable_exception import SerializableException

logger = structlog.get_logger().bind(module=__name__)


def parse_timestamp(ctx: Any, param: Any, value: str) -> datetime:
    try:
        return datetime.strptime(value, settings.TIMESTAMP_FORMAT).replace(
            tzinfo=timezone.utc
        )
    except ValueError:
        raise click.BadParameter(
            f"{value!r} does not match {settings.TIMESTAMP_FORMAT}"
        ) from None


@click.command()
@click.option(
    "--format",
    "format_name",
    default=FORMAT_INFLUX_2,
    type=click.Choice(all_formats()),
    help="Target store the queries are written for.",
)
@click.option(
    "--use-case",
    required=True,
    type=click.Choice(all_use_cases()),
    help="Use case the queries belong to.",
)
@click.option(
    "--query-type", required=True, help="Query type to generate, e.g. lastpoint."
)
@click.option(
    "--scale",
    type=int,
    default=settings.DEFAULT_SCALE,
    help="Number of hosts or trucks in the simulated fleet.",
)
@click.option(
    "--seed",
    type=int,
    default=settings.DEFAULT_SEED,
    help="Seed of the random source. The same seed gives the same queries.",
)
@click.option(
    "--queries", type=int, default=1, help="Number of queries to generate."
)
@click.option(
    "--timestamp-start",
    default=settings.DEFAULT_TIMESTAMP_START,
    callback=parse_timestamp,
    help="Start of the simulated interval.",
)
@click.option(
    "--timestamp-end",
    default=settings.DEFAULT_TIMESTAMP_END,
    callback=parse_timestamp,
    help="End of the simulated interval.",
)
@click.option(
    "--file",
    "output",
    type=click.File("wb"),
    default="-",
    help="Where to write the queries, stdout by default.",
)
@click.option("--log-level", help="Logging level to use.")
def generate_queries(
    *,
    format_name: str,
    use_case: str,
    query_type: str,
    scale: int,
    seed: int,
    queries: int,
    timestamp_start: datetime,
    timestamp_end: datetime,
    output: IO[bytes],
    log_level: Optional[str] = None,
) -> None:
    """
    Write a reproducible set of benchmark queries, one JSON record per line.
    """
    setup_logging(log_level)

    started = time.perf_counter()
    writer = QueryWriter(output)
    try:
        written = writer.write_all(
            generate(
                format_name,
                use_case,
                query_type,
                queries,
                timestamp_start,
                timestamp_end,
                scale,
                Random(seed),
            )
        )
    except SerializableException as error:
        logger.error("query generation failed", **error.to_dict())
        sys.exit(1)

    logger.info(
        "queries generated",
        format=format_name,
        use_case=use_case,
        query_type=query_type,
        count=written,
        elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
    )
