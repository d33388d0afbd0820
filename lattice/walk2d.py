"""Unit-step random walk on the square lattice."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lattice.config import Walk2DConfig
from lattice.pcg32 import Pcg32
from lattice.rng import RunSeeds, SeedGenerator
from lattice.stats import SampleSummary, summarize

# Index order: +x, -x, +y, -y. Shared with the lattice-gas hop.
LATTICE_DIRECTIONS = np.array([[1, 0], [-1, 0], [0, 1], [0, -1]], dtype=np.int64)


@dataclass(frozen=True)
class Walk2DResult:
    """Positions at `t_target` for every run plus one full trace."""

    config: Walk2DConfig
    seeds: tuple[RunSeeds, ...]
    samples: np.ndarray
    trace: np.ndarray
    x: SampleSummary
    y: SampleSummary


def direction_index(u: float) -> int:
    """Quarter [0, 1) into the four lattice directions."""

    return int(4.0 * u)


def walk_2d(worker: Pcg32, steps: int) -> np.ndarray:
    """Return the (x, y) position after each of `steps` steps from the origin."""

    if steps <= 0:
        raise ValueError("steps must be positive")
    draws = worker.uniform_array(steps)
    # 4u is exact in binary floating point, so this matches the 0.25/0.5/0.75 thresholds.
    dirs = (4.0 * draws).astype(np.int64)
    return np.cumsum(LATTICE_DIRECTIONS[dirs], axis=0)


def run_walk_2d(config: Walk2DConfig, master: SeedGenerator) -> Walk2DResult:
    """Run independent walks and sample every one of them at `t_target`."""

    if config.runs <= 0:
        raise ValueError("runs must be positive")
    if config.steps <= 0:
        raise ValueError("steps must be positive")
    if not 1 <= config.t_target <= config.steps:
        raise ValueError(f"t_target must be in 1..{config.steps}")
    if not 0 <= config.trace_run < config.runs:
        raise ValueError(f"trace_run must be in 0..{config.runs - 1}")

    samples = np.empty((config.runs, 2), dtype=np.int64)
    seeds: list[RunSeeds] = []
    trace = np.empty((0, 2), dtype=np.int64)
    for run in range(config.runs):
        run_seeds, worker = master.spawn_worker()
        seeds.append(run_seeds)
        path = walk_2d(worker, config.steps)
        samples[run] = path[config.t_target - 1]
        if run == config.trace_run:
            trace = path

    return Walk2DResult(
        config=config,
        seeds=tuple(seeds),
        samples=samples,
        trace=trace,
        x=summarize(samples[:, 0]),
        y=summarize(samples[:, 1]),
    )
