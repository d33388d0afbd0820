"""Lattice Monte Carlo simulations driven by PCG32 seed hierarchies."""

from .config import DiffusionConfig, MasterSeedConfig, Walk1DConfig, Walk2DConfig
from .pcg32 import Pcg32
from .rng import RunSeeds, SeedGenerator, new_worker

__all__ = [
    "DiffusionConfig",
    "MasterSeedConfig",
    "Pcg32",
    "RunSeeds",
    "SeedGenerator",
    "Walk1DConfig",
    "Walk2DConfig",
    "new_worker",
]
