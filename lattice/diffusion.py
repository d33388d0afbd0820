"""Lattice-gas estimate of the tracer diffusion coefficient.

Particles sit on a periodic square lattice with at most one particle per
site. A sweep makes one hop attempt per particle: a random particle picks one
of the four neighbours and moves only if that site is empty. Unwrapped
coordinates are tracked separately so that the mean square displacement is
not folded by the periodic boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lattice.config import DiffusionConfig
from lattice.pcg32 import Pcg32
from lattice.stats import DiffusionFit, MomentAccumulator, fit_diffusion_coefficient
from lattice.walk2d import LATTICE_DIRECTIONS, direction_index

EMPTY = -1
DIMENSION = 2


class LatticeGas:
    """Site occupancy plus per-particle wrapped and unwrapped positions."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("size must be >= 1")
        self.size = size
        self.sites = np.full((size, size), EMPTY, dtype=np.int64)
        self.position = np.empty((0, DIMENSION), dtype=np.int64)
        self.origin = np.empty((0, DIMENSION), dtype=np.int64)
        self.unwrapped = np.empty((0, DIMENSION), dtype=np.int64)

    @property
    def num_particles(self) -> int:
        return int(self.position.shape[0])

    @classmethod
    def populate(cls, size: int, density: float, worker: Pcg32) -> "LatticeGas":
        """Occupy each site with probability `density`, visiting x-major then y."""

        gas = cls(size)
        draws = worker.uniform_array(size * size).reshape(size, size)
        occupied = draws < density
        coords = np.argwhere(occupied).astype(np.int64)

        count = coords.shape[0]
        gas.sites[occupied] = np.arange(count, dtype=np.int64)
        gas.position = coords
        gas.origin = coords.copy()
        gas.unwrapped = coords.copy()
        return gas

    def sweep(self, worker: Pcg32) -> int:
        """Attempt one hop per particle; return how many hops succeeded."""

        n = self.num_particles
        size = self.size
        sites = self.sites
        position = self.position
        unwrapped = self.unwrapped
        hops = LATTICE_DIRECTIONS.tolist()
        moved = 0
        for _ in range(n):
            p = int(worker.next_uniform_f64() * n)
            dx, dy = hops[direction_index(worker.next_uniform_f64())]
            x = int(position[p, 0])
            y = int(position[p, 1])
            nx = (x + dx) % size
            ny = (y + dy) % size
            if sites[nx, ny] != EMPTY:
                continue
            sites[nx, ny] = p
            sites[x, y] = EMPTY
            position[p, 0] = nx
            position[p, 1] = ny
            unwrapped[p, 0] += dx
            unwrapped[p, 1] += dy
            moved += 1
        return moved

    def mean_square_displacement(self) -> float:
        if self.num_particles == 0:
            return 0.0
        delta = (self.unwrapped - self.origin).astype(np.float64)
        return float(np.sum(delta * delta) / self.num_particles)

    def check_consistency(self) -> None:
        """Raise RuntimeError if sites and particle positions disagree."""

        n = self.num_particles
        ids = self.sites[self.sites != EMPTY]
        if ids.size != n:
            raise RuntimeError(f"occupied sites ({ids.size}) != particle count ({n})")
        if np.any((ids < 0) | (ids >= n)):
            raise RuntimeError("site holds an invalid particle index")
        if np.unique(ids).size != n:
            raise RuntimeError("a particle occupies more than one site")
        if n and not np.array_equal(self.sites[self.position[:, 0], self.position[:, 1]], np.arange(n)):
            raise RuntimeError("particle position does not match its site")
        if n and not np.array_equal(np.mod(self.unwrapped, self.size), self.position):
            raise RuntimeError("unwrapped position does not fold onto the lattice position")

    def occupancy(self) -> np.ndarray:
        return self.sites != EMPTY


@dataclass(frozen=True)
class DiffusionResult:
    """Per-measurement MSD statistics averaged over samples."""

    config: DiffusionConfig
    sweeps: np.ndarray
    msd_mean: np.ndarray
    msd_error: np.ndarray
    particle_counts: np.ndarray
    final_occupancy: np.ndarray
    fit: DiffusionFit | None

    @property
    def diffusion_t(self) -> np.ndarray:
        return self.msd_mean / (2.0 * DIMENSION * self.sweeps)

    @property
    def diffusion_t_error(self) -> np.ndarray:
        return self.msd_error / (2.0 * DIMENSION * self.sweeps)

    def table(self) -> np.ndarray:
        """Rows of (sweep, <dr^2>, D(t), err <dr^2>, err D(t))."""

        return np.column_stack(
            (self.sweeps, self.msd_mean, self.diffusion_t, self.msd_error, self.diffusion_t_error)
        )


def validate_config(config: DiffusionConfig) -> None:
    if config.size < 1:
        raise ValueError("size must be >= 1")
    if not 0.0 < config.density < 1.0:
        raise ValueError("density must be in (0, 1)")
    if config.num_sweeps <= 0 or config.num_measurements <= 0 or config.num_samples <= 0:
        raise ValueError("num_sweeps, num_measurements and num_samples must be positive")
    if config.num_measurements * config.measurement_period != config.num_sweeps:
        raise ValueError(
            f"num_sweeps ({config.num_sweeps}) is not a multiple of num_measurements ({config.num_measurements})"
        )


def run_diffusion(config: DiffusionConfig, worker: Pcg32) -> DiffusionResult:
    """Average MSD(t) over independently populated samples drawn from one worker."""

    validate_config(config)

    period = config.measurement_period
    accumulator = MomentAccumulator(config.num_measurements)
    counts = np.empty(config.num_samples, dtype=np.int64)
    gas = LatticeGas(config.size)

    for sample in range(config.num_samples):
        gas = LatticeGas.populate(config.size, config.density, worker)
        counts[sample] = gas.num_particles
        for sweep in range(1, config.num_sweeps + 1):
            gas.sweep(worker)
            if sweep % period == 0:
                accumulator.add(sweep // period - 1, gas.mean_square_displacement())

    sweeps = np.arange(1, config.num_measurements + 1, dtype=np.int64) * period
    msd_mean = accumulator.mean()
    fit = None
    if config.num_measurements >= 2:
        fit = fit_diffusion_coefficient(sweeps, msd_mean, dimension=DIMENSION)

    return DiffusionResult(
        config=config,
        sweeps=sweeps,
        msd_mean=msd_mean,
        msd_error=accumulator.std_error(),
        particle_counts=counts,
        final_occupancy=gas.occupancy(),
        fit=fit,
    )
