from __future__ import annotations

import logging
import os
import time
from typing import Any

import click
import sentry_sdk

from tsbench.environment import metrics as environment_metrics
from tsbench.environment import setup_logging, setup_sentry
from tsbench.utils.metrics.wrapper import MetricsWrapper

setup_sentry()


setup_logging()
logger = logging.getLogger("tsbench_init")

start = time.perf_counter()
metrics = MetricsWrapper(environment_metrics, "cli")

plugin_folder = os.path.dirname(__file__)


class TsbenchCLI(click.Group):
    def list_commands(self, ctx: Any) -> list[str]:
        rv = []
        for filename in os.listdir(plugin_folder):
            if filename.endswith(".py") and filename != "__init__.py":
                # Click replaces underscores with dashes for command names
                # by default, so commands found on disk are listed the same way
                rv.append(filename[:-3].replace("_", "-"))
        rv.sort()
        return rv

    def get_command(self, ctx: Any, name: str) -> click.Command | None:
        actual_command_name = name.replace("-", "_")
        fn = os.path.join(plugin_folder, actual_command_name + ".py")
        if not os.path.exists(fn):
            return None

        with sentry_sdk.start_transaction(
            op="tsbench_init", name=f"[cli init] {name}", sampled=True
        ):
            ns: dict[str, click.Command] = {}
            with open(fn) as f:
                code = compile(f.read(), fn, "exec")
                eval(code, ns, ns)
            init_time = time.perf_counter() - start
            metrics.timing("tsbench_init_time", init_time)
            logger.debug(f"tsbench initialization took {init_time}s")
        return ns[actual_command_name]


@click.command(cls=TsbenchCLI)
@click.version_option()
def main() -> None:
    """Generate benchmark queries for time series stores."""

