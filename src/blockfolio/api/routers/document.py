"""
API routes for the live document and its export.

Endpoints
---------
- `GET /document`: current blocks.
- `PUT /document`: replace the document (sanitized, persisted immediately).
- `DELETE /document`: clear the stored document, reset to the default.
- `POST /export`: render the document and return the PDF as an attachment.
- `GET /export/status`: state of the exporter.

Export failures map to one summary message each: 409 when an export is
already pending, 422 when there is nothing to export, 502 when the
page-layout renderer fails.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from blockfolio.api.schemas import (
    ClearResponse,
    DocumentPayload,
    DocumentResponse,
    ExportRequest,
    ExportStatus,
)
from blockfolio.api.workspace import Workspace, get_workspace
from blockfolio.pipelines.export_flow import ExportErrorKind

router = APIRouter(tags=["Document"])

_EXPORT_STATUS = {
    ExportErrorKind.BUSY: 409,
    ExportErrorKind.NOTHING_TO_EXPORT: 422,
    ExportErrorKind.RENDER_FAILED: 502,
}


def _document_response(workspace: Workspace) -> DocumentResponse:
    return DocumentResponse(
        key=workspace.key,
        blocks=workspace.editor.document,
        stored=workspace.store.exists(workspace.key),
    )


@router.get("/document", response_model=DocumentResponse, summary="Get the live document")
async def get_document() -> DocumentResponse:
    return _document_response(get_workspace())


@router.put("/document", response_model=DocumentResponse, summary="Replace the live document")
async def put_document(payload: DocumentPayload) -> DocumentResponse:
    """
    Replace the document with ``payload.blocks``.

    Invalid entries are dropped by the sanitizer; an empty or all-invalid
    payload resets the document to the default content.
    """
    workspace = get_workspace()
    if not workspace.replace_document(payload.blocks):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save document",
        )
    return _document_response(workspace)


@router.delete("/document", response_model=ClearResponse, summary="Clear the stored document")
async def delete_document() -> ClearResponse:
    workspace = get_workspace()
    return ClearResponse(key=workspace.key, cleared=workspace.clear())


@router.post(
    "/export",
    response_class=Response,
    summary="Export the live document as PDF",
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_document(request: ExportRequest | None = None) -> Response:
    """
    Render the live document and return the artifact as a download.

    The live document is only read; a failed export leaves it untouched.
    """
    workspace = get_workspace()
    result = await workspace.export(request.title if request else None)
    if result.is_err():
        error = result.unwrap_err()
        raise HTTPException(status_code=_EXPORT_STATUS[error.kind], detail=error.message)

    artifact = result.unwrap()
    return Response(
        content=artifact.data,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/export/status", response_model=ExportStatus, summary="Get exporter state")
async def export_status() -> ExportStatus:
    exporter = get_workspace().exporter
    last = exporter.last_artifact
    return ExportStatus(
        state=exporter.state,
        last_error=exporter.last_error,
        last_filename=last.filename if last else None,
    )


__all__ = ["router"]
