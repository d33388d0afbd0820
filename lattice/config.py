"""Configuration models for the lattice simulations."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from lattice.rng import DEFAULT_MASTER_SEQUENCE, DEFAULT_MASTER_STATE


@dataclass(frozen=True)
class MasterSeedConfig:
    """Constants the process-wide seed generator starts from."""

    state: int = DEFAULT_MASTER_STATE
    sequence: int = DEFAULT_MASTER_SEQUENCE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Walk1DConfig:
    """Ensemble of unbiased +/-1 walks on a line."""

    runs: int = 1
    steps: int = 100000

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Walk2DConfig:
    """Ensemble of unit-step walks on the square lattice."""

    runs: int = 10000
    steps: int = 1000
    t_target: int = 1000
    trace_run: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DiffusionConfig:
    """Lattice-gas run: one sweep is one attempted hop per particle.

    Hops are simulated one at a time, so a run costs about
    `num_samples * num_sweeps * density * size**2` hop attempts. The defaults
    come to roughly 384 million, which takes hours in pure Python.
    """

    size: int = 80
    density: float = 0.6
    num_sweeps: int = 2000
    num_measurements: int = 100
    num_samples: int = 50

    @property
    def measurement_period(self) -> int:
        return self.num_sweeps // self.num_measurements

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RenderConfig:
    """PNG preview settings."""

    colormap: str = "magma"
    trace_image_size: int = 512
    occupancy_scale: int = 4

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
