"""API routes for exporting, previewing and importing all stored data.

These handlers are plain ``def`` functions: the transfer pipeline uses the
synchronous engine and FastAPI runs them in its threadpool.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shoppinglist.database import get_sync_db
from shoppinglist.logging_config import get_logger
from shoppinglist.transfer import (
    ImportOptions,
    ImportTransactionError,
    export_all_data,
    get_import_preview,
    import_data,
)
from shoppinglist.transfer.backup import export_filename

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/data", tags=["data"])


# =============================================================================
# Request Schemas
# =============================================================================


class ImportRequest(BaseModel):
    """An export document to import, with optional import options."""

    data: Any = Field(None, description="The export document")
    options: ImportOptions | None = None


class PreviewRequest(BaseModel):
    data: Any = Field(None, description="The export document")


# =============================================================================
# Endpoints
# =============================================================================


def _export_or_500(db: Session):
    try:
        return export_all_data(db)
    except SQLAlchemyError as e:
        logger.error(f"Export failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to export data", "details": str(e)},
        ) from e


@router.get("/export")
def download_export(db: Session = Depends(get_sync_db)) -> JSONResponse:
    """Download the full export document as a JSON attachment."""
    export = _export_or_500(db)
    metadata = export.metadata

    return JSONResponse(
        content=export.to_document(),
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename()}"',
            "X-Export-Version": export.version,
            "X-Export-Date": export.exported_at,
            "X-Total-Plans": str(metadata.total_plans),
            "X-Total-Lists": str(metadata.total_lists),
            "X-Total-Items": str(metadata.total_items),
        },
    )


@router.post("/export")
def export_metadata(db: Session = Depends(get_sync_db)) -> dict[str, Any]:
    """Describe what an export would contain, without the data itself."""
    export = _export_or_500(db)
    document = export.to_document()
    size_kb = round(len(json.dumps(document)) / 1024)

    return {
        "success": True,
        "metadata": {
            "version": export.version,
            "exportedAt": export.exported_at,
            **document["metadata"],
            "estimatedFileSize": f"{size_kb} KB",
        },
    }


@router.post("/import/preview")
def preview_import(request: PreviewRequest) -> dict[str, Any]:
    """Summarize a document without importing it."""
    if request.data is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data provided for preview",
        )
    return {"success": True, "preview": get_import_preview(request.data).to_dict()}


@router.post("/import")
def import_document(
    request: ImportRequest,
    db: Session = Depends(get_sync_db),
) -> JSONResponse:
    """
    Import an export document.

    Responds 200 when every record was imported or skipped, 422 when some
    records failed (the rest are still committed) and 500 when the whole
    import was rolled back.
    """
    if request.data is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No data provided for import",
        )
    if not isinstance(request.data, dict) or not request.data.get("version") or (
        request.data.get("data") is None
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid data format: missing version or data fields",
        )

    try:
        result = import_data(request.data, request.options, session=db)
    except ImportTransactionError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "Failed to import data",
                "details": str(e),
                "result": e.result.to_dict(),
            },
        ) from e

    return JSONResponse(
        status_code=status.HTTP_200_OK if result.success else status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": result.success, "result": result.to_dict()},
    )
