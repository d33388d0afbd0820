"""Master seed parsing and canonicalization."""

from __future__ import annotations

from dataclasses import dataclass
import re

from lattice.rng import DEFAULT_MASTER_SEQUENCE, DEFAULT_MASTER_STATE

_SPLIT_RE = re.compile(r"\s*[,:]\s*")
_INT_RE = re.compile(r"^(0[xX][0-9A-Fa-f]+|[0-9]+)$")

_EXAMPLE_SEEDS = ["12345,67890", "12345:67890", "0x3039,0x10932", "42"]


class SeedParseError(ValueError):
    """Raised when a master seed is malformed or out of range."""


@dataclass(frozen=True)
class ParsedMasterSeed:
    """Validated master seed parts."""

    original: str
    state: int
    sequence: int
    canonical: str


def canonical_master_seed(state: int, sequence: int) -> str:
    return f"{state},{sequence}"


def parse_master_seed(seed_text: str) -> ParsedMasterSeed:
    """Parse `STATE,SEQ`, `STATE:SEQ` or a bare `STATE` into a master seed."""

    if seed_text is None:
        raise SeedParseError(_error_message("Seed is required."))

    raw = seed_text.strip()
    if not raw:
        raise SeedParseError(_error_message("Seed cannot be empty."))

    parts = _SPLIT_RE.split(raw)
    if len(parts) > 2:
        raise SeedParseError(_error_message("Seed takes at most two parts (state and sequence)."))

    state = _parse_u64(parts[0])
    sequence = _parse_u64(parts[1]) if len(parts) == 2 else DEFAULT_MASTER_SEQUENCE
    return ParsedMasterSeed(raw, state, sequence, canonical_master_seed(state, sequence))


def default_master_seed() -> ParsedMasterSeed:
    canonical = canonical_master_seed(DEFAULT_MASTER_STATE, DEFAULT_MASTER_SEQUENCE)
    return ParsedMasterSeed(canonical, DEFAULT_MASTER_STATE, DEFAULT_MASTER_SEQUENCE, canonical)


def _parse_u64(part: str) -> int:
    if not _INT_RE.fullmatch(part):
        raise SeedParseError(
            _error_message(f"'{part}' is not a non-negative decimal or 0x-prefixed hex integer.")
        )
    value = int(part, 0) if part[:2].lower() == "0x" else int(part, 10)
    if value >= 1 << 64:
        raise SeedParseError(_error_message(f"'{part}' does not fit in 64 bits."))
    return value


def _error_message(reason: str) -> str:
    examples = ", ".join(_EXAMPLE_SEEDS)
    return f"{reason} Examples: {examples}"
