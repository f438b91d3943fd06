"""Translation of store failures into service errors"""
import logging
from contextlib import contextmanager
from typing import Iterator

from domain.errors import (
    ConflictError, InternalError, StoreConflictError, StoreError,
    StoreTimeoutError, UnavailableError,
)

logger = logging.getLogger("hotel_booking.store")


@contextmanager
def translate_store_errors(operation: str, **context) -> Iterator[None]:
    """Re-raise store errors as ConflictError, UnavailableError or InternalError.

    Internal failures are logged with the operation, identifiers and cause;
    the raised error carries no store detail.
    """
    try:
        yield
    except StoreConflictError as e:
        logger.info("%s rejected by store concurrency control: %s", operation, context)
        raise ConflictError(f"Could not {operation}: the booking was changed concurrently") from e
    except StoreTimeoutError as e:
        logger.error("%s timed out: %s cause=%r", operation, context, e)
        raise UnavailableError(f"Could not {operation}: booking store unavailable") from e
    except StoreError as e:
        logger.exception("%s failed: %s cause=%r", operation, context, e)
        raise InternalError(f"Failed to {operation}") from e
