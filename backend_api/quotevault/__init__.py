"""
QuoteVault app package initializer.

Re-exports the hint engine so callers can import from quotevault directly, e.g.:

    from quotevault import pixelate, build_puzzle
"""

# PUBLIC_INTERFACE
from .disclosure import (
    AnagramPuzzle,
    DisclosureRegistry,
    PlayProgress,
    build_puzzle,
    clarity_for_hints,
    get_schedule,
    normalize_answer,
    pixelate,
)

__all__ = [
    "AnagramPuzzle",
    "DisclosureRegistry",
    "PlayProgress",
    "build_puzzle",
    "clarity_for_hints",
    "get_schedule",
    "normalize_answer",
    "pixelate",
]
