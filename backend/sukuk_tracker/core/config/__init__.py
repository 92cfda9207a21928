from __future__ import annotations

from sukuk_tracker.core.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
