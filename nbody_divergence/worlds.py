"""
World construction.

All worlds of a run live in one WorldSet: stacked (W, N, 3) state arrays where
slot 0 is the reference world and slots 1..W-1 are the perturbed worlds, in
the order their perturbation generators were supplied. Body index i refers to
the same body in every slot for the whole run. Masses and radii are stored
once and shared by every world.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence, Tuple

import numpy as np

from nbody_divergence import config as cfg

REFERENCE_SLOT = 0

# A perturbation generator maps a body index to a 3-D displacement.
Perturbation = Callable[[int], Sequence[float]]


@dataclass(frozen=True)
class StartingCondition:
    """Initial state of one body."""
    position: Tuple[float, float, float]
    mass: float = cfg.DEFAULT_MASS
    velocity: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    radius: float = cfg.RADIUS


@dataclass
class WorldSet:
    positions: np.ndarray        # (W, N, 3)
    velocities: np.ndarray       # (W, N, 3)
    accelerations: np.ndarray    # (W, N, 3)
    forces: np.ndarray           # (W, N, 3)
    starting_deviation: np.ndarray  # (W,), 0 for the reference
    masses: np.ndarray           # (N,)
    radii: np.ndarray            # (N,)
    reference_slot: int = field(default=REFERENCE_SLOT)

    @property
    def num_bodies(self) -> int:
        return self.positions.shape[1]

    @property
    def num_perturbed(self) -> int:
        return self.positions.shape[0] - 1

    def perturbed_slots(self) -> list:
        """Slots of every perturbed world, in generator order."""
        return list(range(1, self.positions.shape[0]))


def _as_vector(value, what: str) -> np.ndarray:
    vec = np.asarray(value, dtype=np.float64)
    if vec.shape != (3,) or not np.all(np.isfinite(vec)):
        raise ValueError(f"{what} must be a finite 3-D vector, got {value!r}")
    return vec


def create_worlds(
    starting_conditions: Sequence[StartingCondition],
    instances: Iterable[Perturbation],
) -> WorldSet:
    """
    Build the reference world and one perturbed world per generator.

    The reference starts exactly at `starting_conditions` with zero forces and
    accelerations. Perturbed world k starts with the same velocities and
    positions pos_i + g_k(i), and records the sum of |g_k(i)| over all bodies
    as its starting deviation.

    Raises
    ------
    ValueError
        If there are no bodies, a body's mass is not finite and > 0 or its
        radius is not finite and >= 0, a generator returns something other
        than a finite 3-vector, or a
        perturbed world's starting deviation is zero (its divergence ratio
        would be undefined).
    """
    n = len(starting_conditions)
    if n == 0:
        raise ValueError("At least one body is required")

    ref_pos = np.zeros((n, 3), dtype=np.float64)
    ref_vel = np.zeros((n, 3), dtype=np.float64)
    masses = np.zeros(n, dtype=np.float64)
    radii = np.zeros(n, dtype=np.float64)

    for i, cond in enumerate(starting_conditions):
        ref_pos[i] = _as_vector(cond.position, f"Position of body {i}")
        ref_vel[i] = _as_vector(cond.velocity, f"Velocity of body {i}")
        if not (np.isfinite(cond.mass) and cond.mass > 0):
            raise ValueError(f"Mass of body {i} must be finite and > 0, got {cond.mass}")
        if not (np.isfinite(cond.radius) and cond.radius >= 0):
            raise ValueError(f"Radius of body {i} must be finite and >= 0, got {cond.radius}")
        masses[i] = cond.mass
        radii[i] = cond.radius

    positions = [ref_pos]
    deviations = [0.0]

    for k, perturb in enumerate(instances, start=1):
        pos = ref_pos.copy()
        deviation = 0.0
        for i in range(n):
            displ = _as_vector(perturb(i), f"Displacement of body {i} in world {k}")
            deviation += float(np.sqrt(np.dot(displ, displ)))
            pos[i] += displ

        if deviation <= 0.0:
            raise ValueError(
                f"Perturbed world {k} has zero starting deviation; "
                "every generator must displace at least one body"
            )

        positions.append(pos)
        deviations.append(deviation)

    num_worlds = len(positions)
    stacked = np.ascontiguousarray(np.stack(positions))

    return WorldSet(
        positions=stacked,
        velocities=np.repeat(ref_vel[np.newaxis], num_worlds, axis=0),
        accelerations=np.zeros((num_worlds, n, 3), dtype=np.float64),
        forces=np.zeros((num_worlds, n, 3), dtype=np.float64),
        starting_deviation=np.asarray(deviations, dtype=np.float64),
        masses=masses,
        radii=radii,
    )


def default_starting_conditions():
    """Starting configuration from config.BODY_POSITIONS."""
    return [StartingCondition(position=tuple(p)) for p in cfg.BODY_POSITIONS]
