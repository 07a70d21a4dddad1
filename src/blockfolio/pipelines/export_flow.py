"""
Export flow: the user-facing "export current document" operation.

The flow sanitizes the live document, runs the rendering pipeline, and hands
the assembled tree to a :class:`PageLayoutRenderer`, the only asynchronous
boundary. One export may be in flight at a time; a second request while one
is pending is rejected without touching the renderer.

Outcomes are returned as a :class:`~blockfolio.core.result.Result`:

- ``Ok(ExportArtifact)``: bytes plus the date-stamped filename;
- ``Err(ExportError)`` with ``kind``:

  - ``BUSY``: an export is already pending;
  - ``NOTHING_TO_EXPORT``: the document sanitizes to nothing;
  - ``RENDER_FAILED``: the renderer raised; ``message`` carries its description.

The live document is only read, never mutated, whatever the outcome.
"""

from __future__ import annotations

import asyncio
from datetime import date
from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel, Field

from blockfolio.core.blocks.sanitizer import sanitize
from blockfolio.core.contracts.output import DocumentInfo, RenderedDocument
from blockfolio.core.result import Result, err, ok
from blockfolio.core.settings import get_logger
from blockfolio.pipelines.export import DEFAULT_GENERATOR, render

logger = get_logger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
NOTHING_TO_EXPORT_MESSAGE = "Nothing to export. Add some content first."


class ExportState(StrEnum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ExportErrorKind(StrEnum):
    BUSY = "busy"
    NOTHING_TO_EXPORT = "nothing_to_export"
    RENDER_FAILED = "render_failed"


class ExportError(BaseModel):
    """A user-visible export failure summary."""

    kind: ExportErrorKind
    message: str


class ExportArtifact(BaseModel):
    """A finished export, ready to download."""

    filename: str
    data: bytes = Field(repr=False)
    media_type: str = PDF_MEDIA_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


class PageLayoutRenderer(Protocol):
    """Turns an assembled output tree into a binary artifact."""

    async def render(self, document: RenderedDocument, info: DocumentInfo) -> bytes: ...


def export_filename(basename: str, day: date) -> str:
    """``<basename>-<ISO date>.pdf``"""
    return f"{basename}-{day.isoformat()}.pdf"


class Exporter:
    """Single-flight export controller.

    Parameters
    ----------
    renderer:
        The page-layout renderer to hand the output tree to.
    basename:
        Filename stem for artifacts.
    info:
        Document metadata; its ``title`` is also the default title node text.
    generator:
        Application name stamped into the footer.
    """

    def __init__(
        self,
        renderer: PageLayoutRenderer,
        *,
        basename: str,
        info: DocumentInfo,
        generator: str = DEFAULT_GENERATOR,
    ) -> None:
        self.renderer = renderer
        self.basename = basename
        self.info = info
        self.generator = generator
        self.state = ExportState.IDLE
        self.last_error: ExportError | None = None
        self.last_artifact: ExportArtifact | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is ExportState.PENDING

    async def export(
        self,
        document: Any,
        title: str | None = None,
        *,
        today: date | None = None,
    ) -> Result[ExportArtifact, ExportError]:
        """Export ``document`` (any raw block sequence) to an artifact."""
        if self.is_pending:
            logger.info("Export already in progress; ignoring request")
            return err(
                ExportError(kind=ExportErrorKind.BUSY, message="An export is already in progress.")
            )

        blocks = sanitize(document)
        if not blocks:
            logger.info("Document has no valid blocks; nothing to export")
            return err(
                ExportError(
                    kind=ExportErrorKind.NOTHING_TO_EXPORT, message=NOTHING_TO_EXPORT_MESSAGE
                )
            )

        day = today or date.today()
        info = self.info.model_copy(update={"title": title}) if title else self.info
        self.state = ExportState.PENDING
        self.last_error = None
        try:
            tree = render(blocks, info.title, exported_on=day, generator=self.generator)
            data = await self.renderer.render(tree, info)
        except asyncio.CancelledError:
            logger.warning("Export cancelled")
            self.state = ExportState.IDLE
            raise
        except Exception as exc:
            logger.exception("Export failed")
            error = ExportError(
                kind=ExportErrorKind.RENDER_FAILED,
                message=f"Failed to export PDF: {exc}",
            )
            self.state = ExportState.FAILED
            self.last_error = error
            return err(error)

        artifact = ExportArtifact(filename=export_filename(self.basename, day), data=data)
        self.state = ExportState.SUCCEEDED
        self.last_artifact = artifact
        logger.info(
            "Exported %d blocks to %s (%d bytes)", len(blocks), artifact.filename, artifact.size
        )
        return ok(artifact)


__all__ = [
    "ExportArtifact",
    "ExportError",
    "ExportErrorKind",
    "ExportState",
    "Exporter",
    "NOTHING_TO_EXPORT_MESSAGE",
    "PDF_MEDIA_TYPE",
    "PageLayoutRenderer",
    "export_filename",
]
