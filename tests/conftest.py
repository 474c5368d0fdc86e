"""Shared pytest fixtures and configuration.

This file is automatically loaded by pytest and provides fixtures
accessible to all tests.
"""

import os

import pytest
import torch
from hypothesis import settings, HealthCheck

from scry.leyline import InMemoryDataFeed, Scope
from scry.nissa import DumpConfig, MemorySink
from scry.tolaria import DeviceWorker

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=50,  # Faster for CI
    deadline=None,  # No deadlines for slow tests
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=10,  # Very fast for local development
    deadline=500,  # 500ms deadline for local tests
)

settings.register_profile(
    "thorough",
    max_examples=1000,  # Comprehensive for nightly runs
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Pipeline Fixtures
# =============================================================================

@pytest.fixture
def scope():
    """Fresh root scope."""
    return Scope()


@pytest.fixture
def sink():
    """In-memory sink collecting records."""
    return MemorySink()


@pytest.fixture
def make_worker(sink):
    """Build a DeviceWorker wired to the shared sink and a feed over ``line_ids``."""

    def _make(line_ids, **config_kwargs):
        config = DumpConfig(**config_kwargs)
        worker = DeviceWorker(config, sink=sink)
        feed = InMemoryDataFeed(line_ids, batch_size=max(len(line_ids), 1))
        feed.next()
        worker.set_data_feed(feed)
        return worker

    return _make


# =============================================================================
# Seed-Based RNG for Reproducibility
# =============================================================================

@pytest.fixture(autouse=True)
def reset_random_seeds():
    """Reset random seeds before each test for reproducibility.

    This fixture runs automatically for all tests.
    """
    import random
    import numpy as np

    random.seed(42)
    np.random.seed(42)
    torch.manual_seed(42)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(42)

    yield  # Test runs here
