"""
Error taxonomy shared by all modules.

Every error is an HTTPException so FastAPI renders it without extra handlers.
Store (PostgREST / transport) errors are translated here so services never
leak raw database messages to callers.
"""

import logging
import re
from typing import Optional

import httpx
from fastapi import HTTPException, status
from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

# Postgres / PostgREST error codes
UNIQUE_VIOLATION = "23505"
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
NO_ROWS = "PGRST116"
INVALID_TEXT_REPRESENTATION = "22P02"  # e.g. malformed uuid in a filter

_KEY_FIELD = re.compile(r"Key \((?P<field>[^)]+)\)")
_COLUMN_FIELD = re.compile(r'column "(?P<field>[^"]+)"')


class ConstraintViolationError(HTTPException):
    """Rejected write: a uniqueness or required-field constraint failed."""

    def __init__(self, field: str, reason: str, status_code: int = status.HTTP_409_CONFLICT):
        self.field = field
        self.reason = reason
        super().__init__(status_code=status_code, detail={"field": field, "error": reason})


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class StoreUnavailableError(HTTPException):
    """The data store could not be reached; the caller decides whether to retry."""

    def __init__(self, detail: str = "data store unavailable"):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


def _field_from(pattern: re.Pattern, *texts: Optional[str]) -> str:
    for text in texts:
        if text:
            match = pattern.search(text)
            if match:
                return match.group("field")
    return "unknown"


def translate_store_error(exc: Exception, not_found_detail: str = "not found") -> Exception:
    """Map a store exception onto the error taxonomy. Unknown errors are returned unchanged."""
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, APIError):
        if exc.code == UNIQUE_VIOLATION:
            field = _field_from(_KEY_FIELD, exc.details, exc.message)
            return ConstraintViolationError(field, "already exists")
        if exc.code == NOT_NULL_VIOLATION:
            field = _field_from(_COLUMN_FIELD, exc.message, exc.details)
            return ConstraintViolationError(
                field, "is required", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
            )
        if exc.code == FOREIGN_KEY_VIOLATION:
            field = _field_from(_KEY_FIELD, exc.details, exc.message)
            return ConstraintViolationError(
                field, "references a missing principal", status_code=status.HTTP_422_UNPROCESSABLE_ENTITY
            )
        if exc.code in (NO_ROWS, INVALID_TEXT_REPRESENTATION):
            return NotFoundError(not_found_detail)
        return exc
    if isinstance(exc, httpx.TransportError):
        logger.error(f"Data store unreachable: {exc}")
        return StoreUnavailableError()
    return exc
