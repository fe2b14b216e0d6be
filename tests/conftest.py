"""Pytest configuration and fixtures."""

import random
from unittest.mock import MagicMock

import pytest

from synaptic.config import Settings, get_test_settings
from synaptic.models import Bounds, Note, SimulationState
from synaptic.runtime import ManualFrameClock


@pytest.fixture
def test_settings() -> Settings:
    """Test settings: tag-based hypotheses only."""
    return get_test_settings()


@pytest.fixture
def bounds() -> Bounds:
    """800x600 viewport."""
    return Bounds(width=800, height=600)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible layouts."""
    return random.Random(42)


@pytest.fixture
def sample_notes() -> list[Note]:
    """Five notes; #2 and #4 share the 'stoicism' tag."""
    return [
        Note(id="n1", title="Morning pages", content="Write three pages every morning", tags=()),
        Note(id="n2", title="Amor fati", content="Love whatever happens", tags=("#stoicism", "fate")),
        Note(id="n3", title="Deep work", content="Block out distraction-free hours", tags=("focus",)),
        Note(id="n4", title="Dichotomy of control", content="Some things are up to us", tags=("Stoicism",)),
        Note(id="n5", title="Inbox zero", content="Process, do not check", tags=()),
    ]


@pytest.fixture
def seeded_state(sample_notes, bounds, rng, test_settings) -> SimulationState:
    """State seeded from the sample notes."""
    from synaptic.layout import seed

    return seed(sample_notes, bounds, rng=rng, settings=test_settings)


@pytest.fixture
def artifact_store() -> MagicMock:
    """Mock flashcard store."""
    return MagicMock(spec=["create_artifact"])


@pytest.fixture
def manual_clock() -> ManualFrameClock:
    """Frame clock advanced explicitly by the test."""
    return ManualFrameClock()
