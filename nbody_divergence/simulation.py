# ==============================================================================
# nbody_divergence/simulation.py
# ------------------------------------------------------------------------------
# Divergence-driven simulation loop. All live worlds (plus the reference) are
# advanced together in batches of `per_iter` steps; after each batch every
# perturbed world is compared to the reference and retired once it has
# diverged by `divergence_ratio` times its starting deviation.
# ==============================================================================

import numbers
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Sequence

from nbody_divergence import config as cfg
from nbody_divergence.physics import measure_divergences, run_world_batch
from nbody_divergence.worlds import Perturbation, StartingCondition, create_worlds


@dataclass(frozen=True)
class SimulationParams:
    """Run-wide constants. Read-only for the duration of a run."""
    timestep: float = cfg.TIMESTEP
    grav_const: float = cfg.GRAV_CONST
    per_iter: int = cfg.PER_ITER
    divergence_ratio: float = cfg.DIVERGENCE_RATIO

    def __post_init__(self):
        if not self.timestep > 0:
            raise ValueError(f"timestep must be > 0, got {self.timestep}")
        if not self.grav_const > 0:
            raise ValueError(f"grav_const must be > 0, got {self.grav_const}")
        if isinstance(self.per_iter, bool) or not isinstance(self.per_iter, numbers.Integral) or self.per_iter <= 0:
            raise ValueError(f"per_iter must be a positive integer, got {self.per_iter!r}")
        # Step counts in the output are plain ints, also for numpy integer input
        object.__setattr__(self, "per_iter", int(self.per_iter))
        if not self.divergence_ratio > 1.0:
            raise ValueError(f"divergence_ratio must be > 1, got {self.divergence_ratio}")


class Datapoint(NamedTuple):
    deviation: float  # starting deviation of the retired world
    steps: int        # elapsed steps when it was retired


def run_simulations(
    starting_conditions: Sequence[StartingCondition],
    instances: Iterable[Perturbation],
    params: Optional[SimulationParams] = None,
    verbose: bool = False,
) -> List[Datapoint]:
    """
    Measure divergence times for a set of perturbed copies of one system.

    Parameters
    ----------
    starting_conditions : sequence of StartingCondition
        The N bodies of the reference world.
    instances : iterable of callables
        One perturbation generator per perturbed world, `index -> displacement`.
        Every generator must displace the system by a non-zero total amount.
    params : SimulationParams, optional
        Integration and stopping constants; defaults come from `config`.
    verbose : bool
        Print a line each time a world is retired.

    Returns
    -------
    list[Datapoint]
        One (starting deviation, step count) pair per perturbed world, in
        retirement order. Step counts are multiples of `params.per_iter`.

    The loop runs until every perturbed world has been retired. A world that
    never diverges far enough keeps the loop running indefinitely.
    """
    if params is None:
        params = SimulationParams()

    worlds = create_worlds(starting_conditions, instances)

    active = worlds.perturbed_slots()
    datapoints = []
    timesteps = 0

    while active:
        timesteps += params.per_iter

        # 1) Advance the reference and every active world (parallel, returns at the barrier)
        run_world_batch(
            worlds,
            [worlds.reference_slot] + active,
            steps=params.per_iter,
            dt=params.timestep,
            G=params.grav_const,
        )

        # 2) Compare against the reference and retire diverged worlds.
        # Reverse order so swap-removal only moves already-checked entries.
        divergences = measure_divergences(worlds, active)

        for i in range(len(active) - 1, -1, -1):
            slot = active[i]
            initial_deviation = float(worlds.starting_deviation[slot])

            if divergences[i] / initial_deviation >= params.divergence_ratio:
                active[i] = active[-1]
                active.pop()
                datapoints.append(Datapoint(initial_deviation, timesteps))

                if verbose:
                    print(f"Retired world {slot} at step {timesteps} ({len(active)} remaining)")

    return datapoints
