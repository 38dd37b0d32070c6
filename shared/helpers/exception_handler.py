import logging
from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from shared.core.exceptions import AppException
from shared.core.schemas import JsonOutResult
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)


def _failure(message: str, status_code: str, data=None) -> dict:
    return JsonOutResult(
        success=False,
        data=data,
        status="Failure",
        status_code=str(status_code),
        message=message,
        error=message,
    ).model_dump(mode="json")


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return "; ".join(parts) or "Invalid request"


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        return JSONResponse(
            content=_failure(exc.message, exc.app_status_code, exc.data),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            content=_failure(str(exc.detail), exc.status_code),
            status_code=exc.status_code or 400,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            content=_failure(_format_validation_errors(exc),
                             AppStatusCode.INVALID_INPUT),
            status_code=400,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database failure on %s %s",
                         request.method, request.url.path)
        return JSONResponse(
            content=_failure("Database unavailable",
                             AppStatusCode.DEPENDENCY_FAILURE),
            status_code=500,
        )

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s",
                         request.method, request.url.path)
        return JSONResponse(
            content=_failure("Internal server error",
                             AppStatusCode.OPERATION_FAILED),
            status_code=500,
        )
