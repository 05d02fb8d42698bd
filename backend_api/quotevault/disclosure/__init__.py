"""
Progressive-disclosure hint engine.

Exports:
- pixelate, block_size and resolve_clarity for image renders
- clarity_for_hints, scramble_tier and the per-kind schedules
- DisclosureRegistry and get_schedule for resolving schedules by question kind
- build_puzzle and AnagramPuzzle for letter-tile puzzles
- PlayProgress and normalize_answer for per-question play state

These modules are framework-agnostic and can be reused by views or services
without importing request objects.
"""

from .anagram import AnagramPuzzle, Tile, build_puzzle
from .errors import (
    AssetNotFound,
    DisclosureError,
    EmptyGuess,
    InvalidLevel,
    MalformedAnswer,
    ProgressClosed,
    PuzzleUnavailable,
    TileLocked,
)
from .levels import (
    Disclosure,
    ImageSchedule,
    QuoteSchedule,
    clarity_for_hints,
    reveal_hints,
    scramble_tier,
)
from .pixelation import block_size, pixelate, resolve_clarity, sniff_content_type
from .progress import GuessOutcome, PlayProgress, answers_match, normalize_answer
from .registry import DisclosureRegistry, get_schedule, is_image_kind

__all__ = [
    "AnagramPuzzle",
    "Tile",
    "build_puzzle",
    "AssetNotFound",
    "DisclosureError",
    "EmptyGuess",
    "InvalidLevel",
    "MalformedAnswer",
    "ProgressClosed",
    "PuzzleUnavailable",
    "TileLocked",
    "Disclosure",
    "ImageSchedule",
    "QuoteSchedule",
    "clarity_for_hints",
    "reveal_hints",
    "scramble_tier",
    "block_size",
    "pixelate",
    "resolve_clarity",
    "sniff_content_type",
    "GuessOutcome",
    "PlayProgress",
    "answers_match",
    "normalize_answer",
    "DisclosureRegistry",
    "get_schedule",
    "is_image_kind",
]
