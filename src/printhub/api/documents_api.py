"""
Documents API - Inspect an uploaded document before it is configured.
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ..services.document_service import inspect_document, validate_upload
from .state import AppState, get_state

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("/inspect")
async def inspect(file: UploadFile = File(...), state: AppState = Depends(get_state)):
    """Validate an upload and report its page count."""
    settings = state.settings
    content = await file.read()

    validation = validate_upload(file.filename, len(content), settings.max_upload_bytes,
                                 settings.supported_extensions)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    info = inspect_document(file.filename, content)
    return {
        "name": info.name,
        "extension": info.extension,
        "size": info.size,
        "size_text": info.size_text,
        "pages": info.pages,
    }
