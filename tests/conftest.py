import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from nbody_divergence.worlds import StartingCondition


def shift_body(index, offset):
    """Deterministic generator: displace body `index` by `offset`, others by zero."""
    offset = np.asarray(offset, dtype=np.float64)

    def perturb(i):
        return offset if i == index else np.zeros(3)

    return perturb


@pytest.fixture
def two_body_conditions():
    """Two equal 50-mass bodies at rest, one unit apart on the x axis."""
    return [
        StartingCondition(position=(0.0, 0.0, 0.0), mass=50.0, radius=0.1),
        StartingCondition(position=(1.0, 0.0, 0.0), mass=50.0, radius=0.1),
    ]


@pytest.fixture
def x_shift_generators():
    """Perturbations that shorten the separation along the axis of motion."""
    return [
        shift_body(0, (0.01, 0.0, 0.0)),
        shift_body(1, (-0.02, 0.0, 0.0)),
        shift_body(0, (0.005, 0.0, 0.0)),
    ]
