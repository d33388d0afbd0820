"""Ensemble statistics for Monte Carlo samples."""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np
from scipy.stats import linregress


@dataclass(frozen=True)
class SampleSummary:
    """Mean and unbiased spread of a set of independent samples."""

    count: int
    mean: float
    variance: float
    std_error: float


@dataclass(frozen=True)
class DiffusionFit:
    """Least-squares line through MSD(t) and the coefficient it implies."""

    slope: float
    intercept: float
    r_value: float
    coefficient: float
    dimension: int


def summarize(values: np.ndarray) -> SampleSummary:
    """Summarize samples using the (n - 1) sample variance."""

    data = np.asarray(values, dtype=np.float64).ravel()
    if data.size == 0:
        raise ValueError("cannot summarize an empty sample")

    mean = float(data.mean())
    if data.size < 2:
        return SampleSummary(1, mean, math.nan, math.nan)

    variance = float(data.var(ddof=1))
    return SampleSummary(int(data.size), mean, variance, math.sqrt(variance / data.size))


class MomentAccumulator:
    """Running first and second moments per measurement index.

    Values are counted per index. `add` contributes one value at a single
    index and `add_series` contributes one value at every index. `count` is
    the number of complete samples, i.e. the smallest per-index count.
    """

    def __init__(self, length: int) -> None:
        if length <= 0:
            raise ValueError("length must be positive")
        self.total = np.zeros(length, dtype=np.float64)
        self.total_sq = np.zeros(length, dtype=np.float64)
        self.counts = np.zeros(length, dtype=np.int64)

    def __len__(self) -> int:
        return self.total.shape[0]

    @property
    def count(self) -> int:
        return int(self.counts.min())

    def add(self, index: int, value: float) -> None:
        if not 0 <= index < len(self):
            raise IndexError(f"index {index} out of range for {len(self)} measurements")
        value = float(value)
        self.total[index] += value
        self.total_sq[index] += value * value
        self.counts[index] += 1

    def add_series(self, values: np.ndarray) -> None:
        series = np.asarray(values, dtype=np.float64)
        if series.shape != self.total.shape:
            raise ValueError(f"expected {len(self)} values, got shape {series.shape}")
        self.total += series
        self.total_sq += series * series
        self.counts += 1

    def mean(self) -> np.ndarray:
        if np.any(self.counts == 0):
            raise ValueError("no samples accumulated at some index")
        return self.total / self.counts

    def variance(self) -> np.ndarray:
        mean = self.mean()
        return self.total_sq / self.counts - mean * mean

    def std_error(self) -> np.ndarray:
        var = self.variance()
        err = np.zeros_like(var)
        positive = var > 0.0
        err[positive] = np.sqrt(var[positive] / self.counts[positive])
        return err


def fit_diffusion_coefficient(times: np.ndarray, msd: np.ndarray, *, dimension: int) -> DiffusionFit:
    """Fit MSD = 2 d D t + c and return D."""

    if dimension < 1:
        raise ValueError("dimension must be >= 1")
    t = np.asarray(times, dtype=np.float64)
    y = np.asarray(msd, dtype=np.float64)
    if t.shape != y.shape:
        raise ValueError("times and msd must have the same shape")
    if t.size < 2:
        raise ValueError("need at least two points to fit")

    fit = linregress(t, y)
    return DiffusionFit(
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        r_value=float(fit.rvalue),
        coefficient=float(fit.slope) / (2.0 * dimension),
        dimension=dimension,
    )
