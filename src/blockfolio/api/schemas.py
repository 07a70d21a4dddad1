"""
Request/response models for the Blockfolio HTTP API.

Incoming documents are accepted as raw JSON values and run through the
sanitizer by the workspace, so malformed entries are dropped rather than
rejected with a validation error.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from blockfolio.core.contracts.block import Block
from blockfolio.pipelines.export_flow import ExportError, ExportState


class DocumentPayload(BaseModel):
    """Body of ``PUT /document``."""

    blocks: list[Any] = Field(default_factory=list, description="Raw block sequence.")


class DocumentResponse(BaseModel):
    """The live document as held by the workspace."""

    key: str
    blocks: list[Block]
    stored: bool = Field(..., description="Whether the store currently holds the document.")


class ClearResponse(BaseModel):
    key: str
    cleared: bool


class ExportRequest(BaseModel):
    """Body of ``POST /export``."""

    title: str | None = Field(default=None, description="Overrides the configured document title.")


class ExportStatus(BaseModel):
    """State of the single-flight exporter."""

    state: ExportState
    last_error: ExportError | None = None
    last_filename: str | None = None


__all__ = [
    "ClearResponse",
    "DocumentPayload",
    "DocumentResponse",
    "ExportRequest",
    "ExportStatus",
]
