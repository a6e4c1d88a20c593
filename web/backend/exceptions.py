#!/usr/bin/env python3
"""
Custom exceptions and error handlers for the web application.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceException(Exception):
    """Base exception for service layer errors."""
    pass


class StudentNotFoundException(ServiceException):
    """Raised when a student is not found."""
    pass


class ListingNotFoundException(ServiceException):
    """Raised when a listing is not found."""
    pass


class ScheduleNotFoundException(ServiceException):
    """Raised when a schedule does not exist or is not owned by the caller."""
    pass


class SportSeasonNotFoundException(ServiceException):
    """Raised when a schedule references an unknown sport season."""
    pass


class InvalidDateRangeException(ServiceException):
    """Raised when a requested date range is inverted."""
    pass


class MissingStudentIdentityException(ServiceException):
    """Raised when the caller's student identity header is absent or malformed."""
    pass


NOT_FOUND_EXCEPTIONS = (StudentNotFoundException, ListingNotFoundException, ScheduleNotFoundException)
BAD_REQUEST_EXCEPTIONS = (SportSeasonNotFoundException, InvalidDateRangeException)


async def service_exception_handler(
    request: Request,
    exc: ServiceException
) -> JSONResponse:
    """Map service errors to 404/400/401/500 with a JSON error body."""
    status_code = 500
    if isinstance(exc, NOT_FOUND_EXCEPTIONS):
        status_code = 404
    elif isinstance(exc, BAD_REQUEST_EXCEPTIONS):
        status_code = 400
    elif isinstance(exc, MissingStudentIdentityException):
        status_code = 401

    if status_code >= 500:
        logger.error(f"Service error in {request.url.path}: {exc}", exc_info=True)
    else:
        logger.warning(f"{exc.__class__.__name__} in {request.url.path}: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": str(exc),
            "type": exc.__class__.__name__
        }
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """Render HTTPException in the same envelope as service errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last-resort handler; the traceback is logged, never returned."""
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )
