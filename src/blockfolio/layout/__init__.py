"""Page-layout renderers that turn output node trees into artifacts."""

from __future__ import annotations

from .reportlab_renderer import ReportLabRenderer

__all__ = ["ReportLabRenderer"]
