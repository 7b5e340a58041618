"""
Bus Admin Backend — Auth Route Handlers
=========================================

What:  POST /login (public) and POST /admins (token required), mounted under
       Settings.api_prefix.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from busadmin.database import get_db_session
from busadmin.dependencies import get_auth_service, require_admin
from busadmin.schemas.auth import AdminCreate, LoginRequest, LoginResponse
from busadmin.schemas.common import ErrorResponse, MessageResponse
from busadmin.security import AdminIdentity
from busadmin.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange admin credentials for a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    return await service.login(db, body.email, body.password)


@router.post(
    "/admins",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Admin already exists", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Create another administrator",
)
async def create_admin(
    body: AdminCreate,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    created = await service.create_admin(db, body)
    logger.info("Admin %s created by %s", created.email, admin.email)
    return MessageResponse(message="Admin created successfully")
