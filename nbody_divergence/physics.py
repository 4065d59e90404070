# ==============================================================================
# nbody_divergence/physics.py
# ------------------------------------------------------------------------------
# This file contains the core physics engine of the simulation.
# All computationally intensive functions are JIT-compiled with Numba. A world
# is a set of (N, 3) arrays; many worlds are stacked into (W, N, 3) arrays and
# advanced in parallel, one world per prange iteration.
# ==============================================================================

import numpy as np
from numba import njit, prange

# Kernels are compiled without fastmath: the exclusion test and the force
# expression must be evaluated exactly as written so that runs are bit-for-bit
# reproducible and the radius boundary is sharp.

# ==============================================================================
# FORCE / INTEGRATION KERNEL
# ==============================================================================

@njit(inline="always")
def compute_forces(positions, masses, radii, G, forces):
    """
    Compute pairwise gravitational forces for one world.

    Every ordered pair (i, j) is visited, self-pairs included. A pair whose
    squared distance is <= (r_i + r_j)^2 contributes nothing, which also
    covers i == j. Otherwise the force on i is

        F_vec = (G * m_j * m_i / r^2) * d_vec / r,   d_vec = pos_j - pos_i

    The results overwrite the pre-allocated `forces` array.
    """
    n = positions.shape[0]

    for i in range(n):
        fx = 0.0
        fy = 0.0
        fz = 0.0

        for j in range(n):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            dz = positions[j, 2] - positions[i, 2]
            dist_sq = dx * dx + dy * dy + dz * dz

            min_dist = radii[j] + radii[i]
            if dist_sq <= min_dist * min_dist:
                continue

            force_mag = G * masses[j] * masses[i] / dist_sq
            dist = np.sqrt(dist_sq)

            fx += force_mag * dx / dist
            fy += force_mag * dy / dist
            fz += force_mag * dz / dist

        forces[i, 0] = fx
        forces[i, 1] = fy
        forces[i, 2] = fz


@njit(inline="always")
def integrate_step(positions, velocities, accelerations, forces, masses, radii, dt, G):
    """
    Advance one world by a single step (semi-implicit Euler).

    Forces are computed for the whole world first, then every body is
    integrated with a = F / m, v += a * dt, x += v * dt (using the new v).
    """
    compute_forces(positions, masses, radii, G, forces)

    for a in range(positions.shape[0]):
        for c in range(3):
            accelerations[a, c] = forces[a, c] / masses[a]
            velocities[a, c] += accelerations[a, c] * dt
            positions[a, c] += velocities[a, c] * dt


@njit
def advance_world(positions, velocities, accelerations, forces, masses, radii, steps, dt, G):
    """Run `steps` consecutive integration steps on a single world."""
    for _ in range(steps):
        integrate_step(positions, velocities, accelerations, forces, masses, radii, dt, G)

# ==============================================================================
# PARALLEL BATCH
# ==============================================================================

@njit(parallel=True)
def _advance_worlds_internal(positions, velocities, accelerations, forces, slots, masses, radii, steps, dt, G):
    """
    Internal, Numba-accelerated batch loop, parallelized over worlds.

    Each prange iteration owns the arrays of exactly one slot, so no two
    iterations ever touch the same memory. `masses` and `radii` are shared and
    only read.
    """
    for k in prange(slots.shape[0]):
        w = slots[k]
        for _ in range(steps):
            integrate_step(
                positions[w], velocities[w], accelerations[w], forces[w],
                masses, radii, dt, G,
            )

# ==============================================================================
# DIVERGENCE METRIC
# ==============================================================================

@njit
def deviation_between(positions_a, positions_b):
    """Sum over bodies of |pos_a[i] - pos_b[i]| (bodies are index-aligned)."""
    total = 0.0
    for i in range(positions_a.shape[0]):
        dx = positions_a[i, 0] - positions_b[i, 0]
        dy = positions_a[i, 1] - positions_b[i, 1]
        dz = positions_a[i, 2] - positions_b[i, 2]
        total += np.sqrt(dx * dx + dy * dy + dz * dz)
    return total


@njit
def _measure_divergences_internal(positions, slots, reference_slot):
    result = np.zeros(slots.shape[0], dtype=np.float64)
    for k in range(slots.shape[0]):
        result[k] = deviation_between(positions[slots[k]], positions[reference_slot])
    return result

# ==============================================================================
# PUBLIC API
# ==============================================================================

def run_world_batch(worlds, slots, steps, dt, G):
    """
    Advance the given world slots by `steps` steps each, in parallel.

    `worlds` is a WorldSet (see nbody_divergence.worlds); its stacked state
    arrays are mutated in place. Returns only once every slot has completed
    its steps.
    """
    slots = np.ascontiguousarray(slots, dtype=np.int64)

    _advance_worlds_internal(
        positions=worlds.positions,
        velocities=worlds.velocities,
        accelerations=worlds.accelerations,
        forces=worlds.forces,
        slots=slots,
        masses=worlds.masses,
        radii=worlds.radii,
        steps=steps,
        dt=dt,
        G=G,
    )


def measure_divergences(worlds, slots):
    """
    Divergence metric of each slot against the reference world.

    Returns an array aligned with `slots`.
    """
    slots = np.ascontiguousarray(slots, dtype=np.int64)
    return _measure_divergences_internal(worlds.positions, slots, worlds.reference_slot)
