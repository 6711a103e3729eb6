import logging
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from authz_backend.repositories.base import DuplicateError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, detail or "Not found", headers)

class ForbiddenException(HTTPException):
    """Authenticated, but lacking ``act`` for the resource and scope."""
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_403_FORBIDDEN, detail or "Forbidden", headers)

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail or "Bad request", headers)

class UnauthorizedException(HTTPException):
    """Missing, invalid or expired principal."""
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail or "Unauthorized", headers)

class ConflictException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_409_CONFLICT, detail or "Conflict", headers)

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail or "Internal server error", headers)

def _error_response(exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

def register_exception_handlers(app: FastAPI):

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error_response(NotFoundException(detail=f"{exc.entity_type} not found"))

    @app.exception_handler(DuplicateError)
    async def duplicate_handler(request: Request, exc: DuplicateError):
        return _error_response(ConflictException(detail=str(exc)))

    @app.exception_handler(StorageError)
    async def storage_handler(request: Request, exc: StorageError):
        logger.error(f"{request.method} {request.url.path} failed: {exc} ({exc.__cause__})")
        return _error_response(InternalServerException())
