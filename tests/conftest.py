"""Shared fixtures and synthetic data for the test suite."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest


def jittered_planes(n, dip, dip_direction, jitter, rng):
    """n planes of given attitude with uniform jitter (degrees) on both angles."""
    dips = np.clip(dip + rng.uniform(-jitter, jitter, n), 0.0, 90.0)
    dirs = (dip_direction + rng.uniform(-jitter, jitter, n)) % 360.0
    return np.column_stack((dirs, dips))


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


@pytest.fixture
def two_sets(rng):
    """20 planes 45/090 and 20 planes 10/270, as dip direction / dip."""
    return np.vstack((jittered_planes(20, 45.0, 90.0, 2.0, rng),
                      jittered_planes(20, 10.0, 270.0, 2.0, rng)))
