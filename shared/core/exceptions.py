from typing import Any, Optional
from fastapi import HTTPException, status

from shared.utils.app_status_code import AppStatusCode


class AppException(HTTPException):
    """Base for every error the services raise on purpose.

    Carries the HTTP status, an application status code from
    ``AppStatusCode`` and optional payload (e.g. per-field errors) that the
    exception handler puts into the response envelope.
    """

    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = AppStatusCode.OPERATION_FAILED

    def __init__(self, message: str, status_code: Optional[str] = None, data: Any = None):
        super().__init__(status_code=self.http_status, detail=message)
        self.message = message
        self.app_status_code = str(status_code or self.default_code)
        self.data = data


class ValidationError(AppException):
    http_status = status.HTTP_400_BAD_REQUEST
    default_code = AppStatusCode.INVALID_INPUT


class AuthenticationError(AppException):
    http_status = status.HTTP_401_UNAUTHORIZED
    default_code = AppStatusCode.AUTHENTICATION_TOKEN_INVALID

    def __init__(self, message: str, status_code: Optional[str] = None, data: Any = None):
        super().__init__(message, status_code, data)
        self.headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(AppException):
    http_status = status.HTTP_403_FORBIDDEN
    default_code = AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS


class NotFoundError(AppException):
    http_status = status.HTTP_404_NOT_FOUND
    default_code = AppStatusCode.NOT_FOUND


class ConflictError(AppException):
    http_status = status.HTTP_409_CONFLICT
    default_code = AppStatusCode.SPACE_NOT_AVAILABLE


class DependencyError(AppException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = AppStatusCode.DEPENDENCY_FAILURE


EXCEPTIONS_BY_STATUS = {
    exc.http_status: exc
    for exc in (ValidationError, AuthenticationError, AuthorizationError,
                NotFoundError, ConflictError, DependencyError)
}
