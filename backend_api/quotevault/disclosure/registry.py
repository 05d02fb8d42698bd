from __future__ import annotations

from typing import Dict

from .levels import HintSchedule, ImageSchedule, QuoteSchedule


# PUBLIC_INTERFACE
class DisclosureRegistry:
    """Registry mapping question kinds to hint schedules."""

    _registry: Dict[str, HintSchedule] = {
        "quote": QuoteSchedule(),
        "character": ImageSchedule(),
        "banner": ImageSchedule(),
    }

    @classmethod
    def get(cls, kind: str) -> HintSchedule:
        """Return the schedule for a question kind, or raise KeyError."""
        key = (kind or "").strip().lower()
        if key not in cls._registry:
            raise KeyError(f"Unknown question kind: {kind!r}")
        return cls._registry[key]

    @classmethod
    def register(cls, kind: str, schedule: HintSchedule) -> None:
        """Register or override the schedule for a question kind."""
        key = (kind or "").strip().lower()
        if not key:
            raise ValueError("kind must be a non-empty string")
        cls._registry[key] = schedule

    @classmethod
    def kinds(cls):
        return sorted(cls._registry)


# PUBLIC_INTERFACE
def get_schedule(kind: str) -> HintSchedule:
    """Convenience lookup of the schedule for a question kind.

    Example:
        schedule = get_schedule("banner")
        disclosure = schedule.disclose(hints_used=2, base_clarity=0.02)
    """
    return DisclosureRegistry.get(kind)


# PUBLIC_INTERFACE
def is_image_kind(kind: str) -> bool:
    return isinstance(get_schedule(kind), ImageSchedule)
