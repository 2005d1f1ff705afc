"""
DevCamper Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Each failure kind carries its own HTTP status code, so services can raise
       without knowing about HTTP and the global handlers in main.py can render
       one consistent error envelope.
How:   Each exception class carries a message, optional context dict and a
       class-level status_code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    DevCamperError (base)           → 500
    ├── ValidationError             → 400 Bad Request (client can fix)
    │   └── UploadError             → 400 (missing file, wrong type, too large)
    ├── AuthenticationError         → 401 Unauthorized
    ├── ForbiddenError              → 403 Forbidden
    ├── NotFoundError               → 404 Not Found
    ├── GeocodingError              → 503 Service Unavailable
    ├── FileStorageError            → 500 Internal Server Error
    └── DatabaseError               → 500 Internal Server Error

Response envelope (rendered by main.py):
    {"success": false, "error": "<message>", "request_id": "<id>"}
"""

from typing import Any, Dict, Optional


class DevCamperError(Exception):
    """
    Base exception for all DevCamper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DevCamperError):
    """
    Raised when client input fails validation.

    When:    Bad query parameters, schema rule violations the request models
             cannot express (duplicate name, one-bootcamp-per-publisher).
    """

    status_code = 400

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


class UploadError(ValidationError):
    """Raised when an uploaded photo is missing, not an image, or too large."""

    def __init__(
        self,
        message: str = "Please upload a file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, field="file", context=context)


class AuthenticationError(DevCamperError):
    """Raised when a protected route is called without a valid bearer token."""

    status_code = 401

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(DevCamperError):
    """
    Raised when the caller is authenticated but may not perform the action.

    When:    Role outside the allowed set, or mutating a bootcamp/course
             owned by another user without the admin role.
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Not authorized to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevCamperError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown or malformed bootcamp/course id, zipcode the geocoder
             cannot resolve, missing upload file.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource.capitalize()} not found with id of {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class GeocodingError(DevCamperError):
    """
    Raised when the geocoding service fails.

    What:    No match for an address being stored, or a transport error,
             timeout, non-2xx response or unreadable payload.
    HTTP:    503 Service Unavailable.
    """

    status_code = 503

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(DevCamperError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    The client gets a generic message; paths are only logged.
    """

    def __init__(
        self,
        message: str = "Problem with file upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DevCamperError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; details
    (statement, constraint name) are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
