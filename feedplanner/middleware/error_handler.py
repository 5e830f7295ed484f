"""Global exception handlers producing RFC 7807 problem bodies."""
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from feedplanner.exceptions import AppException, UpstreamFailure
from feedplanner.schemas.common import ErrorDetail

logger = structlog.get_logger()

_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    502: "Bad Gateway",
}


def _problem(status: int, detail: str, error_type: str = "about:blank", instance: str | None = None) -> JSONResponse:
    body = ErrorDetail(
        type=error_type, title=_TITLES.get(status, "Error"), status=status, detail=detail, instance=instance,
    )
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


def setup_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return _problem(exc.status_code, exc.detail, exc.error_type, request.url.path)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return _problem(400, str(exc), instance=request.url.path)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("storage_error", path=request.url.path, error=str(exc))
        upstream = UpstreamFailure()
        return _problem(upstream.status_code, upstream.detail, upstream.error_type, request.url.path)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", path=request.url.path, error=str(exc), exc_info=True)
        return _problem(500, "An unexpected error occurred.")
