"""Export pipeline entry points for Blockfolio.

Currently exposed:

- :func:`render`: block document -> output node tree (``export.py``).
- :class:`Exporter`: single-flight export flow around a page-layout
  renderer (``export_flow.py``).
"""

from __future__ import annotations

from .export import render
from .export_flow import ExportArtifact, ExportError, ExportErrorKind, Exporter, ExportState

__all__ = ["render", "Exporter", "ExportArtifact", "ExportError", "ExportErrorKind", "ExportState"]
