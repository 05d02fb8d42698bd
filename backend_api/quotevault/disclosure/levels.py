from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional, Protocol

from .errors import InvalidLevel

DisclosureMode = Literal["text", "image", "puzzle"]

HINT_STEP = 0.15
REVEAL_THRESHOLD = 0.95
MAX_TIER = 4

# Wrong guesses in a row (without a hint) before a free hint is granted.
QUOTE_AUTO_HINT_AFTER = 5
IMAGE_AUTO_HINT_AFTER = 3


@dataclass(frozen=True)
class Disclosure:
    """What the player is shown for a given hint count.

    Fields:
    - mode: "text" (plain input), "image" (pixelated render) or "puzzle" (letter tiles)
    - clarity_level: image clarity in [0, 1]; None for quote questions
    - tier: scramble tier 1..4 while in puzzle mode, else None
    - revealed: True once the image renders unmodified
    - hint_available: False once the hint ceiling is reached
    """

    mode: DisclosureMode
    clarity_level: Optional[float]
    tier: Optional[int]
    revealed: bool
    hint_available: bool

    def to_dict(self) -> dict:
        return {
            "mode": self.mode,
            "clarity_level": self.clarity_level,
            "tier": self.tier,
            "revealed": self.revealed,
            "hint_available": self.hint_available,
        }


class HintSchedule(Protocol):
    """Protocol for per-kind hint escalation schedules."""

    auto_hint_after: int

    # PUBLIC_INTERFACE
    def disclose(self, hints_used: int, base_clarity: float) -> Disclosure:
        """Map a hint count to the disclosure shown to the player."""

    # PUBLIC_INTERFACE
    def hint_ceiling(self, base_clarity: float) -> int:
        """Return the hint count after which further hints are inert."""


def validate_hints(hints_used) -> int:
    """Reject anything that is not a non-negative integer."""
    if isinstance(hints_used, bool) or not isinstance(hints_used, int):
        raise InvalidLevel(f"hints_used must be an integer, got {hints_used!r}.")
    if hints_used < 0:
        raise InvalidLevel(f"hints_used must be non-negative, got {hints_used}.")
    return hints_used


def validate_clarity(value, name: str = "clarity") -> float:
    """Reject non-numeric, NaN, infinite or out-of-range clarity values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidLevel(f"{name} must be a number, got {value!r}.")
    value = float(value)
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise InvalidLevel(f"{name} must be a finite number in [0, 1], got {value!r}.")
    return value


# PUBLIC_INTERFACE
def clarity_for_hints(hints_used: int, base_clarity: float) -> float:
    """Linear clarity curve: base_clarity + hints_used * 0.15, clamped to [0, 1].

    Only the computed result is clamped; malformed inputs raise InvalidLevel.
    """
    hints_used = validate_hints(hints_used)
    base_clarity = validate_clarity(base_clarity, "base_clarity")
    return min(1.0, max(0.0, base_clarity + hints_used * HINT_STEP))


# PUBLIC_INTERFACE
def reveal_hints(base_clarity: float) -> int:
    """Smallest hint count whose clarity reaches the full-reveal threshold."""
    hints = 0
    while clarity_for_hints(hints, base_clarity) < REVEAL_THRESHOLD:
        hints += 1
    return hints


# PUBLIC_INTERFACE
def scramble_tier(hints_used: int) -> Optional[int]:
    """Quote questions: tier equals hints used, capped at 4; None before the first hint."""
    hints_used = validate_hints(hints_used)
    if hints_used == 0:
        return None
    return min(hints_used, MAX_TIER)


@dataclass(frozen=True)
class ImageSchedule:
    """Character and banner questions: clarity steps, then one puzzle hint."""

    auto_hint_after: int = IMAGE_AUTO_HINT_AFTER

    # PUBLIC_INTERFACE
    def hint_ceiling(self, base_clarity: float) -> int:
        """The hint after full reveal moves to the puzzle; nothing follows it."""
        return reveal_hints(base_clarity) + 1

    # PUBLIC_INTERFACE
    def disclose(self, hints_used: int, base_clarity: float) -> Disclosure:
        clarity = clarity_for_hints(hints_used, base_clarity)
        ceiling = self.hint_ceiling(base_clarity)
        revealed = clarity >= REVEAL_THRESHOLD
        if hints_used >= ceiling:
            return Disclosure("puzzle", clarity, 1, revealed, False)
        return Disclosure("image", clarity, None, revealed, True)


@dataclass(frozen=True)
class QuoteSchedule:
    """Quote questions: every hint tightens the anagram puzzle."""

    auto_hint_after: int = QUOTE_AUTO_HINT_AFTER

    # PUBLIC_INTERFACE
    def hint_ceiling(self, base_clarity: float) -> int:
        return MAX_TIER

    # PUBLIC_INTERFACE
    def disclose(self, hints_used: int, base_clarity: float) -> Disclosure:
        tier = scramble_tier(hints_used)
        available = hints_used < MAX_TIER
        if tier is None:
            return Disclosure("text", None, None, False, available)
        return Disclosure("puzzle", None, tier, False, available)
