"""
Letter-tile anagram puzzles.

The answer is split on whitespace into word groups, one slot per character.
Tiers run from 1 (hardest) to 4 (easiest):

- 1: every character goes into one bag, shuffled, then dealt back left to right
  across all slots regardless of word boundaries
- 2: each word is shuffled on its own
- 3: as 2, with the first letter of each word locked in place
- 4: as 3, with the last letter of each word locked too

Shuffles use random.Random.shuffle (Fisher-Yates). Pass a seeded rng to get a
reproducible layout.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import InvalidLevel, MalformedAnswer, TileLocked
from .levels import MAX_TIER


@dataclass
class Tile:
    """A single draggable letter; locked tiles never move."""

    id: int
    letter: str
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "letter": self.letter, "locked": self.locked}


@dataclass
class AnagramPuzzle:
    """Word groups of tiles in slot order, plus swap-based interaction."""

    tier: int
    groups: List[List[Tile]] = field(default_factory=list)

    def tiles(self) -> Iterator[Tile]:
        for group in self.groups:
            yield from group

    def _locate(self, tile_id: int) -> Tuple[int, int]:
        for g, group in enumerate(self.groups):
            for s, tile in enumerate(group):
                if tile.id == tile_id:
                    return g, s
        raise KeyError(f"Unknown tile: {tile_id!r}")

    # PUBLIC_INTERFACE
    def begin_drag(self, tile_id: int) -> Tile:
        """Designate a tile as drag source; locked tiles refuse."""
        g, s = self._locate(tile_id)
        tile = self.groups[g][s]
        if tile.locked:
            raise TileLocked(f"Tile {tile_id} is locked.")
        return tile

    # PUBLIC_INTERFACE
    def complete_drop(self, source_id: int, target_id: int) -> None:
        """Swap the source and target tiles between their slots.

        Raises:
            KeyError: if either id is not in the puzzle.
            TileLocked: if either tile is locked.
        """
        sg, ss = self._locate(source_id)
        tg, ts = self._locate(target_id)
        source = self.groups[sg][ss]
        target = self.groups[tg][ts]
        if source.locked or target.locked:
            raise TileLocked("Locked tiles cannot be moved.")
        self.groups[sg][ss], self.groups[tg][ts] = target, source

    # PUBLIC_INTERFACE
    def assembled_guess(self) -> str:
        """Tile letters in slot order, locked ones included, no separators."""
        return "".join(tile.letter for tile in self.tiles())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier,
            "groups": [[tile.to_dict() for tile in group] for group in self.groups],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnagramPuzzle":
        groups = [
            [Tile(int(t["id"]), t["letter"], bool(t["locked"])) for t in group]
            for group in data.get("groups", [])
        ]
        return cls(tier=int(data["tier"]), groups=groups)


def split_words(answer: str) -> List[str]:
    """Split a canonical answer into words; whitespace-only answers are malformed."""
    if not isinstance(answer, str) or not answer.strip():
        raise MalformedAnswer("Answer must contain at least one non-whitespace character.")
    return answer.split()


def _validate_tier(tier) -> int:
    if isinstance(tier, bool) or not isinstance(tier, int):
        raise InvalidLevel(f"tier must be an integer, got {tier!r}.")
    if not 1 <= tier <= MAX_TIER:
        raise InvalidLevel(f"tier must be between 1 and {MAX_TIER}, got {tier}.")
    return tier


def _arrange_word(word: str, tier: int, rng: random.Random) -> List[Tuple[str, bool]]:
    """Shuffle one word, keeping the tier's end letters locked."""
    letters = list(word)
    head: List[str] = []
    tail: List[str] = []
    if tier >= 3:
        head = [letters.pop(0)]
    if tier >= 4 and letters:
        tail = [letters.pop()]
    rng.shuffle(letters)
    return (
        [(ch, True) for ch in head]
        + [(ch, False) for ch in letters]
        + [(ch, True) for ch in tail]
    )


# PUBLIC_INTERFACE
def build_puzzle(answer: str, tier: int, rng: Optional[random.Random] = None) -> AnagramPuzzle:
    """Build a fresh puzzle for an answer at the given tier.

    Parameters:
        answer: canonical answer string.
        tier: scramble tier, 1 (hardest) to 4 (easiest).
        rng: optional random source; a new unseeded Random is used when omitted.

    Returns:
        AnagramPuzzle whose groups mirror the answer's words.

    Raises:
        MalformedAnswer: for empty or whitespace-only answers.
        InvalidLevel: for a tier outside 1..4.
    """
    words = split_words(answer)
    tier = _validate_tier(tier)
    rng = rng or random.Random()

    if tier == 1:
        bag = [ch for word in words for ch in word]
        rng.shuffle(bag)
        dealt = iter(bag)
        layouts = [[(next(dealt), False) for _ in word] for word in words]
    else:
        layouts = [_arrange_word(word, tier, rng) for word in words]

    ids = itertools.count()
    groups = [[Tile(next(ids), ch, locked) for ch, locked in layout] for layout in layouts]
    return AnagramPuzzle(tier=tier, groups=groups)
