"""
Pytest configuration and shared fixtures.
"""

import tempfile
from datetime import datetime
from pathlib import Path

import pytest

from node_memory.models.score import DecayStrategy, ForgettingParameters

from tests.helpers import NOW, FakeClock


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def temp_directory():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scenario_params() -> ForgettingParameters:
    """Parameters from the reference forgetting scenario."""
    return ForgettingParameters(
        strategy=DecayStrategy.EXPONENTIAL,
        decay_rate=0.1,
        forgetting_threshold=0.3,
        protection_period_days=3,
        max_forgotten_nodes=2,
    )
