"""
Bus Admin Backend — Bus Route Handlers
========================================

What:  GET/POST /buses and GET/PUT/DELETE /buses/{id}, mounted under
       Settings.api_prefix.
How:   Collects multipart fields and the optional `busImage` file, builds the
       validated input struct, delegates to BusService, returns JSON.
Who:   Called by the admin panel (writes) and public pages (reads).

Request Flow (POST/PUT):
    1. require_admin verifies the bearer token (401 short-circuits)
    2. Form fields → BusCreate / BusUpdate (400 on invalid input)
    3. Image read (bounded to max_file_size + 1 bytes) → ImageUpload
    4. BusService stores the image and persists the record
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from busadmin.context import AppContext
from busadmin.database import get_db_session
from busadmin.dependencies import get_bus_service, get_context, require_admin
from busadmin.schemas.bus import BusCreate, BusResponse, BusUpdate
from busadmin.schemas.common import ErrorResponse, MessageResponse
from busadmin.security import AdminIdentity
from busadmin.services.bus_service import BusService
from busadmin.services.upload_service import UPLOAD_FIELD, ImageUpload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buses", tags=["Buses"])


async def _read_image(file: Optional[UploadFile], context: AppContext) -> Optional[ImageUpload]:
    """
    Turn the multipart part into an ImageUpload.

    A part without a filename (browser form with no file selected) counts as
    no image. At most max_file_size + 1 bytes are read, enough for the size
    check to reject oversized files.
    """
    if file is None or not file.filename:
        return None
    try:
        content = await file.read(context.settings.max_file_size + 1)
    finally:
        await file.close()

    logger.info(
        "Received image: filename=%s, content_type=%s, size=%d bytes",
        file.filename,
        file.content_type,
        len(content),
    )
    return ImageUpload(
        filename=file.filename,
        content_type=file.content_type,
        content=content,
        content_length=file.size,
    )


@router.get(
    "",
    response_model=List[BusResponse],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all buses, newest first",
)
async def list_buses(
    db: AsyncSession = Depends(get_db_session),
    service: BusService = Depends(get_bus_service),
) -> List[BusResponse]:
    return await service.list_buses(db)


@router.get(
    "/{bus_id}",
    response_model=BusResponse,
    responses={404: {"description": "Bus not found", "model": ErrorResponse}},
    summary="Get a single bus",
)
async def get_bus(
    bus_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: BusService = Depends(get_bus_service),
) -> BusResponse:
    return await service.get_bus(db, bus_id)


@router.post(
    "",
    status_code=201,
    response_model=BusResponse,
    responses={
        400: {"description": "Invalid fields or image", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a bus (multipart, optional busImage)",
)
async def create_bus(
    name: Optional[str] = Form(None),
    route: Optional[str] = Form(None),
    stops: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    schedule: Optional[str] = Form(None),
    fare: Optional[str] = Form(None),
    bus_image: Optional[UploadFile] = File(None, alias=UPLOAD_FIELD),
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
    service: BusService = Depends(get_bus_service),
) -> BusResponse:
    payload = BusCreate.from_form(
        name=name, route=route, fare=fare, schedule=schedule, stops=stops, status=status
    )
    image = await _read_image(bus_image, context)
    result = await service.create_bus(db, payload, image)
    logger.info("Bus %s created by %s", result.id, admin.email)
    return result


@router.put(
    "/{bus_id}",
    response_model=BusResponse,
    responses={
        400: {"description": "Invalid fields or image", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Bus not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a bus (multipart, optional busImage)",
)
async def update_bus(
    bus_id: str,
    name: Optional[str] = Form(None),
    route: Optional[str] = Form(None),
    stops: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    schedule: Optional[str] = Form(None),
    fare: Optional[str] = Form(None),
    bus_image: Optional[UploadFile] = File(None, alias=UPLOAD_FIELD),
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
    service: BusService = Depends(get_bus_service),
) -> BusResponse:
    payload = BusUpdate.from_form(
        name=name, route=route, fare=fare, schedule=schedule, stops=stops, status=status
    )
    image = await _read_image(bus_image, context)
    result = await service.update_bus(db, bus_id, payload, image)
    logger.info("Bus %s updated by %s", bus_id, admin.email)
    return result


@router.delete(
    "/{bus_id}",
    response_model=MessageResponse,
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Bus not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a bus and its stored image",
)
async def delete_bus(
    bus_id: str,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
    service: BusService = Depends(get_bus_service),
) -> MessageResponse:
    result = await service.delete_bus(db, bus_id)
    logger.info("Bus %s deleted by %s", bus_id, admin.email)
    return result
