import numpy as np


def uniform_displacement(rng: np.random.Generator, scale: float):
    """
    Return a perturbation generator `index -> displacement`.

    Each call draws a fresh vector with components uniform in [0, scale).
    The generator owns `rng`; it ignores the body index.
    """
    def perturb(_index: int) -> np.ndarray:
        return rng.random(3) * scale

    return perturb


def make_uniform_perturbations(count: int, scale: float, seed=None):
    """
    Build `count` independent uniform perturbation generators.

    Each generator gets its own child Generator spawned from one parent
    seeded with `seed`, so a seeded call always yields the same displacements.
    """
    assert count > 0, "count must be > 0"
    assert scale > 0, "scale must be > 0"

    parent = np.random.default_rng(seed)
    return [uniform_displacement(child, scale) for child in parent.spawn(count)]
