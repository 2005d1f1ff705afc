"""
DevCamper Backend — Uploaded File Serving
===========================================

What:  GET /uploads/{filename} serves stored bootcamp photos.
Security:
    The name is resolved against the upload root; anything that resolves
    outside of it (../, absolute paths) is reported as not found.
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from app.schemas.common import ErrorResponse
from app.services.file_service import file_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{filename:path}",
    responses={
        200: {"description": "Image file"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve an uploaded bootcamp photo",
)
async def serve_upload(filename: str) -> FileResponse:
    # media type is guessed from the extension
    return FileResponse(path=str(file_service.resolve(filename)))
