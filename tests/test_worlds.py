"""Tests for StartingCondition and the world factory."""

import numpy as np
import pytest

from nbody_divergence import config as cfg
from nbody_divergence.worlds import (
    REFERENCE_SLOT,
    StartingCondition,
    create_worlds,
    default_starting_conditions,
)
from conftest import shift_body


class TestStartingCondition:

    def test_defaults(self):
        cond = StartingCondition(position=(1.0, 2.0, 3.0))
        assert cond.mass == 50.0
        assert cond.radius == pytest.approx(0.1)
        assert tuple(cond.velocity) == (0.0, 0.0, 0.0)

    def test_default_configuration(self):
        conds = default_starting_conditions()
        assert len(conds) == len(cfg.BODY_POSITIONS) == 7
        assert conds[5].position == (0.0, 0.0, 0.0)
        assert all(c.mass == cfg.DEFAULT_MASS for c in conds)


class TestCreateWorlds:

    def test_reference_copies_starting_conditions(self):
        conds = [
            StartingCondition(position=(1.0, 2.0, 3.0), velocity=(0.1, 0.0, 0.0)),
            StartingCondition(position=(-1.0, 0.0, 0.5), mass=10.0, radius=0.2),
        ]
        worlds = create_worlds(conds, [])

        ref = REFERENCE_SLOT
        np.testing.assert_array_equal(worlds.positions[ref], [[1.0, 2.0, 3.0], [-1.0, 0.0, 0.5]])
        np.testing.assert_array_equal(worlds.velocities[ref], [[0.1, 0.0, 0.0], [0.0, 0.0, 0.0]])
        np.testing.assert_array_equal(worlds.forces[ref], np.zeros((2, 3)))
        np.testing.assert_array_equal(worlds.accelerations[ref], np.zeros((2, 3)))
        assert worlds.starting_deviation[ref] == 0.0
        np.testing.assert_array_equal(worlds.masses, [50.0, 10.0])
        np.testing.assert_array_equal(worlds.radii, [0.1, 0.2])
        assert worlds.num_perturbed == 0

    def test_one_world_per_generator_in_order(self, two_body_conditions, x_shift_generators):
        worlds = create_worlds(two_body_conditions, x_shift_generators)

        assert worlds.num_perturbed == 3
        assert worlds.num_bodies == 2
        assert worlds.perturbed_slots() == [1, 2, 3]
        np.testing.assert_allclose(worlds.starting_deviation, [0.0, 0.01, 0.02, 0.005])
        assert worlds.positions[1, 0, 0] == pytest.approx(0.01)
        assert worlds.positions[2, 1, 0] == pytest.approx(0.98)

    def test_all_worlds_share_shape(self, two_body_conditions, x_shift_generators):
        worlds = create_worlds(two_body_conditions, x_shift_generators)
        for arr in (worlds.positions, worlds.velocities, worlds.accelerations, worlds.forces):
            assert arr.shape == (4, 2, 3)
            assert arr.dtype == np.float64
            assert arr.flags["C_CONTIGUOUS"]

    def test_perturbed_worlds_keep_initial_velocities(self):
        conds = [
            StartingCondition(position=(0.0, 0.0, 0.0), velocity=(0.0, 1.0, 0.0)),
            StartingCondition(position=(2.0, 0.0, 0.0), velocity=(0.0, -1.0, 0.0)),
        ]
        worlds = create_worlds(conds, [shift_body(0, (0.0, 0.0, 0.01))])
        np.testing.assert_array_equal(worlds.velocities[1], worlds.velocities[0])

    def test_velocity_arrays_are_independent(self, two_body_conditions, x_shift_generators):
        worlds = create_worlds(two_body_conditions, x_shift_generators)
        worlds.velocities[1, 0, 0] = 5.0
        assert worlds.velocities[0, 0, 0] == 0.0
        assert worlds.velocities[2, 0, 0] == 0.0

    def test_deviation_sums_displacement_lengths(self, two_body_conditions):
        def perturb(i):
            return (0.03, 0.04, 0.0) if i == 0 else (0.0, 0.0, 0.1)

        worlds = create_worlds(two_body_conditions, [perturb])
        assert worlds.starting_deviation[1] == pytest.approx(0.15)

    def test_generator_called_once_per_body_in_index_order(self, two_body_conditions):
        calls = []

        def perturb(i):
            calls.append(i)
            return (0.01, 0.0, 0.0)

        create_worlds(two_body_conditions, iter([perturb]))
        assert calls == [0, 1]


class TestCreateWorldsPreconditions:

    def test_rejects_empty_configuration(self):
        with pytest.raises(ValueError, match="At least one body"):
            create_worlds([], [])

    def test_rejects_non_positive_mass(self):
        conds = [StartingCondition(position=(0.0, 0.0, 0.0), mass=0.0)]
        with pytest.raises(ValueError, match="Mass of body 0"):
            create_worlds(conds, [])

    def test_rejects_negative_radius(self):
        conds = [
            StartingCondition(position=(0.0, 0.0, 0.0)),
            StartingCondition(position=(1.0, 0.0, 0.0), radius=-0.1),
        ]
        with pytest.raises(ValueError, match="Radius of body 1"):
            create_worlds(conds, [])

    @pytest.mark.parametrize("mass", [float("inf"), float("nan"), -1.0])
    def test_rejects_non_finite_or_negative_mass(self, mass):
        conds = [StartingCondition(position=(0.0, 0.0, 0.0), mass=mass)]
        with pytest.raises(ValueError, match="Mass of body 0"):
            create_worlds(conds, [])

    @pytest.mark.parametrize("radius", [float("inf"), float("nan")])
    def test_rejects_non_finite_radius(self, radius):
        conds = [StartingCondition(position=(0.0, 0.0, 0.0), radius=radius)]
        with pytest.raises(ValueError, match="Radius of body 0"):
            create_worlds(conds, [])

    def test_rejects_zero_displacement(self, two_body_conditions):
        with pytest.raises(ValueError, match="zero starting deviation"):
            create_worlds(two_body_conditions, [lambda i: (0.0, 0.0, 0.0)])

    def test_rejects_malformed_displacement(self, two_body_conditions):
        with pytest.raises(ValueError, match="finite 3-D vector"):
            create_worlds(two_body_conditions, [lambda i: (0.01, 0.0)])

    def test_rejects_non_finite_displacement(self, two_body_conditions):
        with pytest.raises(ValueError, match="finite 3-D vector"):
            create_worlds(two_body_conditions, [lambda i: (np.nan, 0.0, 0.0)])

    def test_rejects_malformed_position(self):
        conds = [StartingCondition(position=(0.0, 0.0))]
        with pytest.raises(ValueError, match="Position of body 0"):
            create_worlds(conds, [])
