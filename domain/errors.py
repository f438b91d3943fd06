"""Domain Errors

Service-level errors carry the HTTP status and machine-readable code the API
layer reports. Store-level errors are raised by repository implementations and
translated by the application services.
"""


class BookingError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgumentError(BookingError, ValueError):
    """Malformed dates, non-positive counts or malformed stored data"""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(BookingError):
    """Resource absent, or not owned by the caller"""
    status_code = 404
    code = "RESOURCE_NOT_FOUND"

    @classmethod
    def for_resource(cls, resource: str) -> "NotFoundError":
        return cls(f"{resource} not found")


class ConflictError(BookingError):
    """Insufficient availability, illegal transition or lost update race"""
    status_code = 409
    code = "CONFLICT"


class InternalError(BookingError):
    status_code = 500
    code = "INTERNAL_ERROR"


class UnavailableError(BookingError):
    status_code = 503
    code = "SERVICE_UNAVAILABLE"


# ==================== STORE ERRORS ====================

class StoreError(Exception):
    """Failure reported by an inventory or catalog store"""


class StoreConflictError(StoreError):
    """Write rejected by the store's concurrency control"""


class StoreTimeoutError(StoreError):
    """Store call exceeded the client's timeout"""
