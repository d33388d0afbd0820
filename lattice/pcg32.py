"""PCG32 (XSH-RR) pseudo-random engine with 64-bit state and 32-bit output."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

PCG32_MULTIPLIER = 6364136223846793005
MASK64 = (1 << 64) - 1
MASK32 = (1 << 32) - 1
UINT32_RANGE = float(1 << 32)


def rotr32(value: int, rot: int) -> int:
    """Rotate a 32-bit value right by `rot` positions (rot in [0, 31])."""

    value &= MASK32
    rot &= 31
    return (value >> rot) | ((value << ((-rot) & 31)) & MASK32)


@dataclass
class Pcg32:
    """One PCG32 stream.

    `state` evolves with every draw; `increment` is odd and selects which of
    the 2^63 streams the generator walks. Instances are not thread-safe.
    """

    state: int = 0
    increment: int = 1

    @classmethod
    def seeded(cls, initstate: int, initseq: int) -> "Pcg32":
        rng = cls()
        rng.seed(initstate, initseq)
        return rng

    def seed(self, initstate: int, initseq: int) -> None:
        """Reset to the stream selected by `initseq`, positioned by `initstate`."""

        self.state = 0
        self.increment = ((int(initseq) << 1) | 1) & MASK64
        self.next_u32()
        self.state = (self.state + int(initstate)) & MASK64
        self.next_u32()

    def next_u32(self) -> int:
        old = self.state & MASK64
        self.state = (old * PCG32_MULTIPLIER + (self.increment | 1)) & MASK64
        # Output permutes the pre-transition state.
        xorshifted = (((old >> 18) ^ old) >> 27) & MASK32
        return rotr32(xorshifted, old >> 59)

    def next_uniform_f64(self) -> float:
        """Uniform double in [0, 1)."""

        return self.next_u32() / UINT32_RANGE

    def u32_array(self, count: int) -> np.ndarray:
        if count < 0:
            raise ValueError("count must be non-negative")
        return np.fromiter((self.next_u32() for _ in range(count)), dtype=np.uint32, count=count)

    def uniform_array(self, count: int) -> np.ndarray:
        """Draw `count` uniforms in the same order as repeated `next_uniform_f64` calls."""

        return self.u32_array(count).astype(np.float64) / UINT32_RANGE
