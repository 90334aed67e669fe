# image_loader/core/errors.py
"""
Error taxonomy shared by the token codec, the store adapters and the controller.

Every error carries the HTTP status and a stable error code so that the API
layer can render it without interpreting it:
- validation_error (400)
- unauthorized (401)
- invalid_token (401)
- forbidden (403)
- not_found (404)
- conflict (409)
- storage_error (500)
- storage_timeout (504)
"""


class ServiceError(Exception):
    """Base class for errors returned by the core to its callers."""

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Caller input is malformed (400)."""
    status_code = 400
    error_code = "validation_error"


class UnauthenticatedError(ServiceError):
    """Credentials do not match any identity (401)."""
    status_code = 401
    error_code = "unauthorized"


class InvalidTokenError(UnauthenticatedError):
    """Token is malformed, expired, not yet valid or carries a bad signature (401)."""
    error_code = "invalid_token"


class ForbiddenError(ServiceError):
    """Caller is authenticated but may not act on the target resource (403)."""
    status_code = 403
    error_code = "forbidden"


class NotFoundError(ServiceError):
    """Entity is absent (404)."""
    status_code = 404
    error_code = "not_found"


class ConflictError(ServiceError):
    """Uniqueness violation, e.g. duplicate login (409)."""
    status_code = 409
    error_code = "conflict"


class StorageError(ServiceError):
    """Opaque failure reported by the relational or the object store (500)."""
    status_code = 500
    error_code = "storage_error"


class StorageTimeoutError(StorageError):
    """A store call did not finish before its deadline (504)."""
    status_code = 504
    error_code = "storage_timeout"


__all__ = [
    "ServiceError",
    "ValidationError",
    "UnauthenticatedError",
    "InvalidTokenError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "StorageError",
    "StorageTimeoutError",
]
