from __future__ import annotations


class DisclosureError(Exception):
    """Base class for hint engine failures."""


class AssetNotFound(DisclosureError):
    """Source media could not be read or decoded."""


class InvalidLevel(DisclosureError, ValueError):
    """A clarity level, hint count or tier is malformed.

    Raised instead of clamping so calibration bugs surface early.
    """


class MalformedAnswer(DisclosureError, ValueError):
    """The canonical answer is empty or whitespace only."""


class TileLocked(DisclosureError):
    """A locked tile was used as a drag source or drop target."""


class EmptyGuess(DisclosureError, ValueError):
    """A blank guess reached verification."""


class ProgressClosed(DisclosureError):
    """The question play already reached its terminal state."""


class PuzzleUnavailable(DisclosureError):
    """The question is not in puzzle mode."""
