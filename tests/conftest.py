import sys
from pathlib import Path

import pytest

# Make the repository root importable when running pytest without installing
root_dir = Path(__file__).parent.parent.absolute()
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from core.aggregator import StateAggregator  # noqa: E402
from fakes import FakeDeviceSource, RecordingTransport, StepClock  # noqa: E402


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def aggregator(clock):
    return StateAggregator(clock=clock)


@pytest.fixture
def source():
    return FakeDeviceSource()


@pytest.fixture
def transport():
    return RecordingTransport()
