"""Two-tier seeding: a master stream that mints seed pairs for per-run workers."""

from __future__ import annotations

from dataclasses import dataclass

from lattice.pcg32 import MASK64, Pcg32

DEFAULT_MASTER_STATE = 12345
DEFAULT_MASTER_SEQUENCE = 67890


def _normalize_seed(seed: int) -> int:
    return int(seed) & MASK64


def new_worker(seed_a: int, seed_b: int) -> Pcg32:
    """Build the generator owned by one simulation run."""

    return Pcg32.seeded(initstate=seed_a, initseq=seed_b)


@dataclass(frozen=True)
class RunSeeds:
    """Seed pair minted by the master for a single run."""

    seed_a: int
    seed_b: int

    def worker(self) -> Pcg32:
        return new_worker(self.seed_a, self.seed_b)


class SeedGenerator:
    """Long-lived master stream; every seed it hands out comes from `next_u32`."""

    def __init__(
        self,
        initstate: int = DEFAULT_MASTER_STATE,
        initseq: int = DEFAULT_MASTER_SEQUENCE,
    ) -> None:
        self.initstate = _normalize_seed(initstate)
        self.initseq = _normalize_seed(initseq)
        self._rng = Pcg32.seeded(self.initstate, self.initseq)

    def __repr__(self) -> str:
        return f"SeedGenerator(initstate={self.initstate}, initseq={self.initseq})"

    def next_seed(self) -> int:
        return self._rng.next_u32()

    def derive_run_seeds(self) -> RunSeeds:
        seed_a = self.next_seed()
        seed_b = self.next_seed()
        return RunSeeds(seed_a, seed_b)

    def spawn_worker(self) -> tuple[RunSeeds, Pcg32]:
        seeds = self.derive_run_seeds()
        return seeds, seeds.worker()

    def seeds(self, count: int) -> list[int]:
        if count < 0:
            raise ValueError("count must be non-negative")
        return [self.next_seed() for _ in range(count)]
