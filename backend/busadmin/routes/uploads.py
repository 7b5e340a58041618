"""
Bus Admin Backend — Uploaded Image Serving
============================================

What:  GET /uploads/{filename} returns a stored bus image.
How:   The name is resolved inside the upload directory (names that would
       escape it are rejected with 400); FileResponse picks the media type
       from the extension.
Who:   <img> tags in the admin panel and public pages that use a bus imageUrl.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from busadmin.dependencies import get_upload_store
from busadmin.exceptions import NotFoundError
from busadmin.schemas.common import ErrorResponse
from busadmin.services.upload_service import UPLOAD_URL_PREFIX, UploadStore

router = APIRouter(prefix=UPLOAD_URL_PREFIX, tags=["Uploads"])


@router.get(
    "/{filename}",
    summary="Serve an uploaded bus image",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid file path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_upload(
    filename: str,
    uploads: UploadStore = Depends(get_upload_store),
) -> FileResponse:
    path = uploads.resolve(filename)
    if not path.is_file():
        raise NotFoundError(resource="file", resource_id=filename)

    return FileResponse(
        path=str(path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
