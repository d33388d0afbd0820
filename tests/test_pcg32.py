from __future__ import annotations

import numpy as np
import pytest

from lattice.pcg32 import MASK32, UINT32_RANGE, Pcg32, rotr32

REFERENCE_42_54 = [0xA15C02B7, 0x7B47F409, 0xBA1D3330, 0x83D2F293, 0xBFA4784B, 0xCBED606E]


def test_reference_vectors_for_42_54() -> None:
    rng = Pcg32.seeded(42, 54)

    assert [rng.next_u32() for _ in range(6)] == REFERENCE_42_54


def test_seed_sets_state_and_odd_increment() -> None:
    rng = Pcg32.seeded(42, 54)

    assert rng.increment == 109
    assert rng.state == 1753877967969059832
    for _ in range(6):
        rng.next_u32()
    assert rng.state == 13742400798436595530


def test_default_master_seed_golden_sequence() -> None:
    rng = Pcg32.seeded(12345, 67890)

    assert [rng.next_u32() for _ in range(3)] == [2187804205, 622185135, 3120145872]


@pytest.mark.parametrize("initseq", [0, 1, 54, 67890, (1 << 63) + 7, (1 << 64) - 1])
def test_increment_is_always_odd(initseq: int) -> None:
    rng = Pcg32.seeded(0, initseq)

    assert rng.increment & 1 == 1
    assert rng.increment == ((initseq << 1) | 1) & ((1 << 64) - 1)


def test_reseeding_replaces_prior_state() -> None:
    rng = Pcg32.seeded(7, 9)
    for _ in range(10):
        rng.next_u32()
    rng.seed(42, 54)

    assert rng.next_u32() == REFERENCE_42_54[0]


def test_streams_differ_from_first_draw() -> None:
    a = Pcg32.seeded(42, 54)
    b = Pcg32.seeded(42, 55)

    assert a.next_u32() != b.next_u32()
    assert Pcg32.seeded(42, 55).next_u32() == 2916272015


def test_sequences_are_deterministic() -> None:
    first = Pcg32.seeded(2187804205, 622185135)
    second = Pcg32.seeded(2187804205, 622185135)

    assert [first.next_u32() for _ in range(1000)] == [second.next_u32() for _ in range(1000)]


def test_uniform_is_u32_over_two_pow_32() -> None:
    rng = Pcg32.seeded(2187804205, 622185135)

    assert rng.next_uniform_f64() == 368562370 / 2**32
    assert rng.next_uniform_f64() == 1532200957 / 2**32


def test_uniform_upper_bound_is_exclusive() -> None:
    assert MASK32 / UINT32_RANGE < 1.0

    rng = Pcg32.seeded(12345, 67890)
    values = [rng.next_uniform_f64() for _ in range(20000)]
    assert min(values) >= 0.0
    assert max(values) < 1.0


def test_array_draws_match_scalar_draws() -> None:
    scalar = Pcg32.seeded(3, 5)
    vector = Pcg32.seeded(3, 5)

    expected = [scalar.next_uniform_f64() for _ in range(64)]
    drawn = vector.uniform_array(64)

    assert drawn.dtype == np.float64
    assert drawn.tolist() == expected
    assert scalar.state == vector.state


def test_u32_array_negative_count_rejected() -> None:
    with pytest.raises(ValueError):
        Pcg32.seeded(1, 1).u32_array(-1)


def test_rotr32_edge_cases() -> None:
    assert rotr32(0xDEADBEEF, 0) == 0xDEADBEEF
    assert rotr32(1, 1) == 0x80000000
    assert rotr32(0x80000000, 31) == 1
    assert rotr32(0x12345678, 4) == 0x81234567
