import inspect
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

import sentry_sdk

from tsbench import settings
from tsbench.utils.metrics import MetricsBackend
from tsbench.utils.metrics.types import Tags


def create_metrics(prefix: str, tags: Optional[Tags] = None) -> MetricsBackend:
    """Return a backend that prefixes every metric with `prefix`. It records into
    a TestingMetricsBackend when running the test suite and into a
    DummyMetricsBackend otherwise. Prefixes must start with `tsbench.<category>`,
    for example: `tsbench.generate_queries`.
    """
    from tsbench.utils.metrics.wrapper import MetricsWrapper

    backend: MetricsBackend
    if settings.TESTING:
        from tsbench.utils.metrics.backends.testing import TestingMetricsBackend

        backend = TestingMetricsBackend()
    else:
        from tsbench.utils.metrics.backends.dummy import DummyMetricsBackend

        backend = DummyMetricsBackend()

    return MetricsWrapper(backend, prefix, tags)


F = TypeVar("F", bound=Callable[..., Any])


def with_span(op: str = "function") -> Callable[[F], F]:
    """Wraps a function call in a Sentry AM span"""

    def decorator(func: F) -> F:
        frame_info = inspect.stack()[1]
        filename = frame_info.filename

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with sentry_sdk.start_span(description=func.__name__, op=op) as span:
                span.set_data("filename", filename)
                return func(*args, **kwargs)

        return cast(F, wrapper)

    return decorator
