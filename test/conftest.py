"""
conftest.py — pytest fixtures shared across the test suite.

Provides seeded generators, sample paths and default configurations
so that individual test modules stay short and focused.
"""

import numpy as np
import pytest

from drone_planner.models import PlannerConfig


# =========================================================================
# Random fixtures
# =========================================================================

@pytest.fixture()
def rng() -> np.random.Generator:
    """Seeded generator, fresh for every test."""
    return np.random.default_rng(42)


# =========================================================================
# Config fixtures
# =========================================================================

@pytest.fixture()
def default_config() -> PlannerConfig:
    return PlannerConfig()


@pytest.fixture()
def raw_config() -> PlannerConfig:
    """Config with auto-smoothing disabled (planner output untouched)."""
    return PlannerConfig(auto_smooth=False)


# =========================================================================
# Path fixtures
# =========================================================================

@pytest.fixture()
def straight_path():
    """Six collinear waypoints along +x."""
    return [np.array([float(i), 0.0, 0.0]) for i in range(6)]


@pytest.fixture()
def l_shaped_path():
    """(0,0,0) → (3,0,0) → (3,3,0) with unit spacing."""
    pts = [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0],
           [3, 1, 0], [3, 2, 0], [3, 3, 0]]
    return [np.array(p, dtype=np.float64) for p in pts]
