"""
Bus Admin Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the error taxonomy of the API.
How:   Each exception carries a user-safe message and an optional context
       dict. Global exception handlers (registered in main.py) map them to
       HTTP status codes and a structured JSON body.
Who:   Raised by services, the upload store and the auth dependency.

Exception Hierarchy:
    BusAdminError (base)
    ├── ValidationError       → 400 Bad Request
    ├── AuthenticationError   → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    ├── FileStorageError      → 500 Internal Server Error
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class BusAdminError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BusAdminError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, bad status value, unsupported image type,
             image too large, duplicate admin email.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "File type '.gif' is not supported. Allowed types: .jpeg, .jpg, .png",
            "details": {"field": "busImage", "extension": ".gif"}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(BusAdminError):
    """
    Raised when a request cannot be tied to an administrator.

    When:    Missing, malformed, tampered or expired bearer token; wrong
             login credentials.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Not authenticated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BusAdminError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE /buses/{id} with an unknown or malformed id,
             GET /uploads/{name} for a missing file.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(BusAdminError):
    """
    Raised when writing an uploaded image to the upload directory fails.

    When:    Disk full, permission denied, directory not writable.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BusAdminError):
    """
    Raised when a record store operation fails unexpectedly.

    When:    Connection lost, commit failed, constraint violation not mapped
             to a ValidationError.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the context
    (exception type, record id) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
