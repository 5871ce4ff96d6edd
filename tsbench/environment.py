import logging
import os
from typing import Optional

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog.processors import JSONRenderer
from structlog.types import EventDict
from structlog_sentry import SentryProcessor

from tsbench import settings
from tsbench.utils.metrics.util import create_metrics


def add_severity_attribute(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Set the severity attribute for structured log ingestion
    """
    if method_name == "warn":
        method_name = "warning"

    event_dict["severity"] = method_name
    event_dict["level"] = method_name

    return event_dict


def drop_level(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    The "SentryProcessor" requires a `level` field but we're already
    emitting it as `severity`, so we delete the duplication once
    SentryProcessor is done
    """
    del event_dict["level"]

    return event_dict


def setup_logging(level: Optional[str] = None) -> None:
    if level is None:
        level = settings.LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=settings.LOG_FORMAT,
        force=True,
    )

    # structlog output goes through the stdlib handlers, keeping stdout free
    # for generated queries
    structlog.configure(
        cache_logger_on_first_use=True,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        processors=[
            add_severity_attribute,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            SentryProcessor(),
            drop_level,
            JSONRenderer(),
        ],
    )


def setup_sentry() -> None:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            LoggingIntegration(event_level=logging.WARNING),
        ],
        release=os.getenv("TSBENCH_RELEASE"),
        traces_sample_rate=settings.SENTRY_TRACE_SAMPLE_RATE,
    )


metrics = create_metrics("tsbench")
