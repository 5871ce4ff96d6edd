import os

os.environ["TSBENCH_SETTINGS"] = "test"

from random import Random  # noqa: E402
from typing import Callable, Iterator, Sequence  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import pytest  # noqa: E402

from tsbench import settings  # noqa: E402
from tsbench.utils.metrics.backends.testing import (  # noqa: E402
    clear_recorded_metric_calls,
)

ScriptedRandomFactory = Callable[..., Mock]


def pytest_configure() -> None:
    assert (
        settings.TESTING
    ), "settings.TESTING is False, try `TSBENCH_SETTINGS=test`"


@pytest.fixture(autouse=True)
def clear_metrics() -> Iterator[None]:
    yield
    clear_recorded_metric_calls()


@pytest.fixture
def seeded_random() -> Random:
    return Random(settings.DEFAULT_SEED)


@pytest.fixture
def scripted_random() -> ScriptedRandomFactory:
    """
    Builds a random source whose draws are fixed up front: window offsets in
    whole seconds, entity index samples and fleet choices, consumed in order.
    """

    def build(
        offsets: Sequence[int] = (),
        samples: Sequence[Sequence[int]] = (),
        choices: Sequence[str] = (),
    ) -> Mock:
        random = Mock(spec=Random)
        random.randint.side_effect = [offset * 10**9 for offset in offsets]
        random.sample.side_effect = [list(sample) for sample in samples]
        random.choice.side_effect = list(choices)
        return random

    return build
