from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from django.conf import settings

DEFAULTS: Dict[str, Any] = {
    "MEDIA_ROOT": None,
    "RENDER_FORMAT": "JPEG",
    "RENDER_QUALITY": 90,
    "RENDER_CACHE_TIMEOUT": 300,
    "POINTS_BASE": 100,
    "HINT_PENALTY": 10,
}


# PUBLIC_INTERFACE
def get_setting(name: str) -> Any:
    """Read one entry of settings.QUOTEVAULT, falling back to DEFAULTS.

    Looked up on every call so override_settings works in tests.
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown QuoteVault setting: {name!r}")
    return getattr(settings, "QUOTEVAULT", {}).get(name, DEFAULTS[name])


def media_root() -> Path:
    """QuoteVault media root; falls back to Django's MEDIA_ROOT."""
    return Path(get_setting("MEDIA_ROOT") or settings.MEDIA_ROOT)
