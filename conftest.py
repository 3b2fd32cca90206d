#!/usr/bin/env python3
"""
conftest.py - Shared pytest configuration and fixtures for consistency scoring

Provides:
- Marker registration (unit/integration/slow)
- --skip-slow option
- Agent factories and the clustered-plus-outlier agent group
- Seeded random generators for the power method
"""
import random
import string
from typing import Callable, List

import numpy as np
import pytest

from consistency.schemas import Agent


def pytest_addoption(parser):
    """Add custom command line options"""
    parser.addoption(
        "--skip-slow",
        action="store_true",
        default=False,
        help="Skip slow-running tests"
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated, no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (multiple components)")
    config.addinivalue_line("markers", "slow: Slow-running tests (>1 second)")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests by directory and apply --skip-slow"""
    skip_slow = pytest.mark.skip(reason="--skip-slow specified")
    for item in items:
        path = str(item.fspath)
        if "/tests/unit/" in path and not item.get_closest_marker("unit"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in path and not item.get_closest_marker("integration"):
            item.add_marker(pytest.mark.integration)

        if config.getoption("--skip-slow") and item.get_closest_marker("slow"):
            item.add_marker(skip_slow)


# ============================================================================
# Agent Fixtures
# ============================================================================

@pytest.fixture
def make_agent() -> Callable[..., Agent]:
    """Factory producing agents with unique ids."""
    counter = {"n": 0}

    def _make(*beliefs: str, plans: List[str] = None) -> Agent:
        counter["n"] += 1
        return Agent(f"agent_{counter['n']}", beliefs=list(beliefs), plans=list(plans or []))

    return _make


def generate_literals(count: int, seed: int = 7, length: int = 12) -> List[str]:
    """Distinct random lowercase literals."""
    rng = random.Random(seed)
    literals = set()
    while len(literals) < count:
        literals.add("".join(rng.choice(string.ascii_lowercase) for _ in range(length)))
    return sorted(literals)


@pytest.fixture
def literal_generator() -> Callable[..., List[str]]:
    """Access to generate_literals from tests."""
    return generate_literals


@pytest.fixture
def clustered_agents(make_agent) -> List[Agent]:
    """
    Two similar agents and one outlier:
    (a) 3 beliefs, (b) the same 3 plus one, (c) 1500 random beliefs.
    """
    first = make_agent("foo", "xxx", "bar")
    second = make_agent("foo", "xxx", "bar", "hello")
    outlier = make_agent(*generate_literals(1500))
    return [first, second, outlier]


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator for reproducible power iteration."""
    return np.random.default_rng(42)
