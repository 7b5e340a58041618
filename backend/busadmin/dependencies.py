"""
Bus Admin Backend — FastAPI Dependencies
==========================================

What:  Accessors for the AppContext and its services, plus the bearer-token
       guard for protected routes.
How:   Everything is read from `request.app.state.context`, so a test can
       build an app around its own Settings without patching modules.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from busadmin.context import AppContext
from busadmin.exceptions import AuthenticationError
from busadmin.security import AdminIdentity
from busadmin.services.auth_service import AuthService
from busadmin.services.bus_service import BusService
from busadmin.services.upload_service import UploadStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_bus_service(context: AppContext = Depends(get_context)) -> BusService:
    return context.bus_service


def get_auth_service(context: AppContext = Depends(get_context)) -> AuthService:
    return context.auth_service


def get_upload_store(context: AppContext = Depends(get_context)) -> UploadStore:
    return context.uploads


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
) -> AdminIdentity:
    """
    Guard for protected operations.

    Missing or non-Bearer Authorization header, bad signature and expiry all
    raise AuthenticationError (401) before the route body runs. On success the
    identity is returned and attached to `request.state.admin`.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    identity = context.tokens.verify(credentials.credentials)
    request.state.admin = identity
    return identity
