import json
import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shared.core.schemas import JsonOutResult

logger = logging.getLogger(__name__)

WRAPPED_KEYS = {"status", "status_code", "message"}


class JsonResponseMiddleware(BaseHTTPMiddleware):
    """Wraps successful JSON bodies in the common response envelope.

    Error responses are already shaped by the exception handlers and
    non-JSON responses (document downloads) pass through untouched.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        # Skip docs/openapi endpoints
        if request.url.path.startswith(("/openapi", "/docs", "/redoc")):
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Uncaught exception on %s %s",
                             request.method, request.url.path)
            wrapped_error = JsonOutResult(
                success=False,
                data=None,
                status="Failure",
                status_code="500",
                message="Internal server error",
                error="Internal server error",
            ).model_dump(mode="json")
            return JSONResponse(content=wrapped_error, status_code=500)

        content_type = response.headers.get("content-type", "")
        if not (200 <= response.status_code < 300) or "application/json" not in content_type:
            return response

        # Read the full body
        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk

        headers = {k: v for k, v in response.headers.items()
                   if k.lower() != "content-length"}

        try:
            data = json.loads(body_bytes.decode("utf-8")) if body_bytes else None
        except ValueError:
            return Response(content=body_bytes, status_code=response.status_code, headers=headers)

        # Skip wrapping if already wrapped
        if isinstance(data, dict) and WRAPPED_KEYS.issubset(data.keys()):
            return JSONResponse(content=data, status_code=response.status_code, headers=headers)

        wrapped = JsonOutResult(
            success=True,
            data=data,
            status="Success",
            status_code=str(response.status_code),
            message="Data retrieved successfully"
        ).model_dump(mode="json")

        return JSONResponse(content=wrapped, status_code=response.status_code, headers=headers)
