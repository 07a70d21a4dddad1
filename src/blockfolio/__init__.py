"""Blockfolio: block-structured portfolio documents and their PDF export.

The package is split into:

- ``core``: contracts, sanitizer, codec, search utilities, storage, settings.
- ``editor``: the in-process editing surface and the project-card synchronizer.
- ``pipelines``: the export rendering pipeline and the export flow.
- ``layout``: the page-layout renderer adapter (reportlab).
- ``api`` / ``cli``: the HTTP and terminal export trigger surfaces.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
