"""PNG-ready rasters derived from simulation results."""

from __future__ import annotations

import matplotlib
from matplotlib.colors import ListedColormap
import numpy as np


def trace_density(trace: np.ndarray, *, size: int) -> np.ndarray:
    """Bin a 2D walk trace into a `size x size` visit-count grid (row = y, top = max y)."""

    if trace.ndim != 2 or trace.shape[1] != 2:
        raise ValueError("trace must have shape (n, 2)")
    if size <= 0:
        raise ValueError("size must be positive")

    counts = np.zeros((size, size), dtype=np.float64)
    if trace.shape[0] == 0:
        return counts

    path = np.vstack((np.zeros((1, 2), dtype=np.int64), trace.astype(np.int64)))
    lo = path.min(axis=0)
    span = max(int((path.max(axis=0) - lo).max()) + 1, 1)
    cells = ((path - lo) * size) // span
    cells = np.clip(cells, 0, size - 1)
    np.add.at(counts, (size - 1 - cells[:, 1], cells[:, 0]), 1.0)
    return counts


def density_colormap_rgb(counts: np.ndarray, *, colormap: str = "magma") -> np.ndarray:
    """Log-scale visit counts and colour them with a matplotlib colormap."""

    cmap = matplotlib.colormaps[colormap]
    values = np.log1p(np.asarray(counts, dtype=np.float64))
    peak = float(values.max()) if values.size else 0.0
    norm = values / peak if peak > 0.0 else values
    rgba = cmap(norm)
    rgb = np.round(rgba[..., :3] * 255.0).astype(np.uint8)
    rgb[counts <= 0] = 0
    return rgb


def occupancy_rgb(occupancy: np.ndarray, *, scale: int = 1) -> np.ndarray:
    """Colour a boolean site grid (empty / occupied), each site `scale` pixels wide."""

    if occupancy.ndim != 2:
        raise ValueError("occupancy must be 2D")
    if scale < 1:
        raise ValueError("scale must be >= 1")

    cmap = ListedColormap(["#101820", "#f2aa4c"], name="lattice_occupancy")
    rgba = cmap(occupancy.astype(np.int32))
    rgb = np.round(rgba[..., :3] * 255.0).astype(np.uint8)
    if scale > 1:
        rgb = np.repeat(np.repeat(rgb, scale, axis=0), scale, axis=1)
    return rgb
