from __future__ import annotations

import os
from typing import Any, MutableMapping

from tsbench.settings.validation import validate_settings

# All settings must be uppercased, have a default value and cannot start with _.
# Override modules selected through TSBENCH_SETTINGS replace any variable that
# follows this convention.

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(message)s"

TESTING = False

SENTRY_DSN = os.environ.get("SENTRY_DSN")
SENTRY_TRACE_SAMPLE_RATE = float(os.environ.get("SENTRY_TRACE_SAMPLE_RATE", 0))

#####################
# Query generation #
#####################

# Seed used when the caller does not pick one
DEFAULT_SEED = 123
DEFAULT_SCALE = 1

# Simulation interval used when the caller does not pick one
DEFAULT_TIMESTAMP_START = "2016-01-01T00:00:00Z"
DEFAULT_TIMESTAMP_END = "2016-01-02T06:00:01Z"

# Rendering of window boundaries inside generated queries
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

BUCKET_NAME = "benchmark"
QUERY_METHOD = "POST"
QUERY_PATH = "/api/v2/query"

##################
# Bucket admin #
##################

INFLUX_URL = os.environ.get("INFLUX_URL", "http://localhost:8086")
INFLUX_TOKEN = os.environ.get("INFLUX_TOKEN", "")
INFLUX_ORG = os.environ.get("INFLUX_ORG", "")

BUCKET_DESCRIPTION = "tsbs load test"
# seconds to wait after a bucket is created or deleted so the server settles
BUCKET_SETTLE_SECONDS = 1.0
BUCKET_REQUEST_TIMEOUT = 30.0


def _load_settings(obj: MutableMapping[str, Any] = locals()) -> None:
    """Load settings from the path provided in the TSBENCH_SETTINGS environment
    variable if provided. Users can provide a short name like `test` that will
    be expanded to `settings_test.py` in this directory, or they can provide a
    full absolute path such as `/foo/bar/my_settings.py`."""

    import importlib
    import importlib.abc
    import importlib.util
    import os

    settings = os.environ.get("TSBENCH_SETTINGS")

    if settings:
        if settings.startswith("/"):
            if not settings.endswith(".py"):
                settings += ".py"

            settings_spec = importlib.util.spec_from_file_location(
                "tsbench.settings.custom", settings
            )
            assert settings_spec is not None
            settings_module = importlib.util.module_from_spec(settings_spec)
            assert isinstance(settings_spec.loader, importlib.abc.Loader)
            settings_spec.loader.exec_module(settings_module)
        else:
            module_format = (
                ".%s" if settings.startswith("settings_") else ".settings_%s"
            )
            settings_module = importlib.import_module(
                module_format % settings, "tsbench.settings"
            )

        for attr in dir(settings_module):
            if attr.isupper():
                obj[attr] = getattr(settings_module, attr)


_load_settings()
validate_settings(locals())
