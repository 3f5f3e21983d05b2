from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from localretail.core.exceptions import (
    AlreadyClosedError,
    BackendError,
    ConsistencyError,
    NotFoundError,
)
from localretail.logger_config import logger


def _error_response(status_code: int, message: str, error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "status_code": status_code,
            "error": error,
            **extra,
        },
    )


def register_error_handlers(app: FastAPI):
    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, e: NotFoundError):
        logger.warning(f"{request.method} {request.url.path}: {str(e)}")
        return _error_response(status.HTTP_404_NOT_FOUND, str(e), "Not Found")

    @app.exception_handler(AlreadyClosedError)
    async def handle_already_closed(request: Request, e: AlreadyClosedError):
        logger.warning(f"{request.method} {request.url.path}: {str(e)}")
        return _error_response(status.HTTP_409_CONFLICT, str(e), "Conflict")

    @app.exception_handler(ConsistencyError)
    async def handle_consistency(request: Request, e: ConsistencyError):
        logger.error(f"{request.method} {request.url.path}: {str(e)}")
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, str(e), "Consistency Error", details=e.to_dict()
        )

    @app.exception_handler(BackendError)
    async def handle_backend(request: Request, e: BackendError):
        logger.error(f"{request.method} {request.url.path}: {str(e)}")
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, str(e), "Storage Unavailable")

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, e: Exception):
        logger.exception("Unhandled exception occurred")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "Internal Server Error",
            details=str(e),
        )
