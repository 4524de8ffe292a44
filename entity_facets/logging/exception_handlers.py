# entity_facets/logging/exception_handlers.py
"""Exception handlers mapping facet engine errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from entity_facets.core.exceptions import InvalidQueryError, UnknownEntityError

logger = logging.getLogger(__name__)


async def unknown_entity_exception_handler(request: Request, exc: UnknownEntityError):
    logger.warning(f"{request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=404, content={"detail": str(exc), "available_entities": exc.available})


async def invalid_query_exception_handler(request: Request, exc: InvalidQueryError):
    logger.warning(f"{request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.info(f"{request.method} {request.url.path}: request validation failed")

    # Convert errors to a safe format for JSON response
    def convert_error(error):
        if isinstance(error, dict):
            return {k: convert_error(v) for k, v in error.items()}
        elif isinstance(error, list):
            return [convert_error(item) for item in error]
        else:
            return str(error)

    return JSONResponse(status_code=422, content={"detail": convert_error(exc.errors())})


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path}: database error: {str(exc)}")
    return JSONResponse(status_code=500, content={"detail": "Database error"})


async def general_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path}: unhandled error")
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnknownEntityError, unknown_entity_exception_handler)
    app.add_exception_handler(InvalidQueryError, invalid_query_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
