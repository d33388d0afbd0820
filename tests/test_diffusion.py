from __future__ import annotations

import numpy as np
import pytest

from lattice.config import DiffusionConfig
from lattice.diffusion import EMPTY, LatticeGas, run_diffusion, validate_config
from lattice.pcg32 import Pcg32
from lattice.rng import new_worker

SMALL = DiffusionConfig(size=6, density=0.5, num_sweeps=20, num_measurements=5, num_samples=3)


def _single_particle_gas(size: int, x: int, y: int) -> LatticeGas:
    gas = LatticeGas(size)
    gas.sites[x, y] = 0
    gas.position = np.array([[x, y]], dtype=np.int64)
    gas.origin = gas.position.copy()
    gas.unwrapped = gas.position.copy()
    return gas


def test_populate_places_particles_in_row_major_order() -> None:
    draws = Pcg32.seeded(2187804205, 622185135).uniform_array(36).reshape(6, 6)
    gas = LatticeGas.populate(6, 0.5, new_worker(2187804205, 622185135))

    expected = np.argwhere(draws < 0.5)
    assert gas.num_particles == int((draws < 0.5).sum())
    assert gas.position.tolist() == expected.tolist()
    assert np.array_equal(gas.occupancy(), draws < 0.5)
    for p, (x, y) in enumerate(expected):
        assert gas.sites[x, y] == p
    gas.check_consistency()


def test_single_particle_always_hops() -> None:
    gas = _single_particle_gas(4, 1, 2)
    worker = Pcg32.seeded(9, 9)

    for sweep in range(1, 25):
        assert gas.sweep(worker) == 1
        gas.check_consistency()
        delta = gas.unwrapped[0] - gas.origin[0]
        assert int(np.abs(delta).sum()) % 2 == sweep % 2
    assert gas.mean_square_displacement() == float(np.sum((gas.unwrapped[0] - gas.origin[0]) ** 2))


def test_hops_wrap_periodically_but_unwrapped_coordinates_do_not() -> None:
    gas = _single_particle_gas(2, 0, 0)
    worker = Pcg32.seeded(1, 2)
    for _ in range(50):
        gas.sweep(worker)

    assert np.all((gas.position >= 0) & (gas.position < 2))
    assert np.array_equal(np.mod(gas.unwrapped, 2), gas.position)


def test_full_lattice_blocks_every_hop() -> None:
    gas = LatticeGas(2)
    gas.sites[:] = np.arange(4).reshape(2, 2)
    gas.position = np.argwhere(np.ones((2, 2), dtype=bool)).astype(np.int64)
    gas.origin = gas.position.copy()
    gas.unwrapped = gas.position.copy()

    assert gas.sweep(Pcg32.seeded(3, 4)) == 0
    assert gas.mean_square_displacement() == 0.0


def test_empty_lattice_has_zero_displacement() -> None:
    gas = LatticeGas(3)

    assert gas.sweep(Pcg32.seeded(3, 4)) == 0
    assert gas.mean_square_displacement() == 0.0
    gas.check_consistency()


def test_check_consistency_detects_corruption() -> None:
    gas = LatticeGas.populate(5, 0.5, Pcg32.seeded(8, 8))
    assert gas.num_particles > 1
    gas.sites[gas.sites == 0] = EMPTY

    with pytest.raises(RuntimeError):
        gas.check_consistency()


def test_sweeps_conserve_particles() -> None:
    worker = Pcg32.seeded(21, 34)
    gas = LatticeGas.populate(8, 0.4, worker)
    count = gas.num_particles
    for _ in range(10):
        gas.sweep(worker)
        gas.check_consistency()

    assert int(gas.occupancy().sum()) == count


def test_run_diffusion_table_shape_and_columns() -> None:
    result = run_diffusion(SMALL, new_worker(2187804205, 622185135))
    table = result.table()

    assert table.shape == (5, 5)
    assert result.sweeps.tolist() == [4, 8, 12, 16, 20]
    np.testing.assert_allclose(table[:, 2], result.msd_mean / (4.0 * result.sweeps))
    np.testing.assert_allclose(table[:, 4], result.msd_error / (4.0 * result.sweeps))
    assert np.all(result.msd_mean >= 0.0)
    assert np.all(result.msd_error >= 0.0)
    assert result.particle_counts.shape == (3,)
    assert result.final_occupancy.shape == (6, 6)
    assert int(result.final_occupancy.sum()) == int(result.particle_counts[-1])
    assert result.fit is not None


def test_run_diffusion_is_deterministic() -> None:
    a = run_diffusion(SMALL, new_worker(3120145872, 64255102))
    b = run_diffusion(SMALL, new_worker(3120145872, 64255102))
    c = run_diffusion(SMALL, new_worker(2187804205, 622185135))

    assert np.array_equal(a.table(), b.table())
    assert np.array_equal(a.particle_counts, b.particle_counts)
    assert not np.array_equal(a.table(), c.table())


def test_dilute_gas_diffuses_faster_than_dense_gas() -> None:
    base = dict(size=10, num_sweeps=40, num_measurements=4, num_samples=4)
    dilute = run_diffusion(DiffusionConfig(density=0.1, **base), Pcg32.seeded(5, 6))
    dense = run_diffusion(DiffusionConfig(density=0.9, **base), Pcg32.seeded(5, 6))

    assert dilute.diffusion_t[-1] > dense.diffusion_t[-1]


@pytest.mark.parametrize(
    "config",
    [
        DiffusionConfig(size=0),
        DiffusionConfig(density=0.0),
        DiffusionConfig(density=1.0),
        DiffusionConfig(num_sweeps=10, num_measurements=3),
        DiffusionConfig(num_sweeps=10, num_measurements=20),
        DiffusionConfig(num_samples=0),
        DiffusionConfig(num_measurements=0),
    ],
)
def test_validate_config_rejects(config: DiffusionConfig) -> None:
    with pytest.raises(ValueError):
        validate_config(config)
