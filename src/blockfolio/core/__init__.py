"""Core package initializer for Blockfolio.

Settings conveniences live in ``blockfolio.core.settings``:
    from blockfolio.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
