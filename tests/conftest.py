import random

import pytest

from battery.scheduler import FrameScheduler


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def rng():
    return random.Random(7)
