"""Unbiased random walk on the integer line."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lattice.config import Walk1DConfig
from lattice.pcg32 import Pcg32
from lattice.rng import RunSeeds, SeedGenerator
from lattice.stats import DiffusionFit, fit_diffusion_coefficient

# A draw strictly above this steps right, otherwise left.
STEP_THRESHOLD = 0.5


@dataclass(frozen=True)
class Walk1DResult:
    """Trajectories of every run and the ensemble <x^2(t)>."""

    config: Walk1DConfig
    seeds: tuple[RunSeeds, ...]
    positions: np.ndarray
    x2_mean: np.ndarray
    fit: DiffusionFit | None


def step_1d(u: float) -> int:
    return 1 if u > STEP_THRESHOLD else -1


def step_array(draws: np.ndarray) -> np.ndarray:
    return np.where(np.asarray(draws) > STEP_THRESHOLD, 1, -1).astype(np.int64)


def walk_1d(worker: Pcg32, steps: int) -> np.ndarray:
    """Return the position after each of `steps` unit steps from the origin."""

    if steps <= 0:
        raise ValueError("steps must be positive")
    return np.cumsum(step_array(worker.uniform_array(steps)))


def run_walk_1d(config: Walk1DConfig, master: SeedGenerator) -> Walk1DResult:
    """Run `config.runs` independent walks, each on its own master-derived worker."""

    if config.runs <= 0:
        raise ValueError("runs must be positive")
    if config.steps <= 0:
        raise ValueError("steps must be positive")

    positions = np.empty((config.runs, config.steps), dtype=np.int64)
    seeds: list[RunSeeds] = []
    for run in range(config.runs):
        run_seeds, worker = master.spawn_worker()
        seeds.append(run_seeds)
        positions[run] = walk_1d(worker, config.steps)

    x2_mean = np.mean(np.square(positions, dtype=np.float64), axis=0)
    fit = None
    if config.steps >= 2:
        # Index i holds the position after i + 1 steps.
        times = np.arange(1, config.steps + 1, dtype=np.float64)
        fit = fit_diffusion_coefficient(times, x2_mean, dimension=1)

    return Walk1DResult(config, tuple(seeds), positions, x2_mean, fit)
