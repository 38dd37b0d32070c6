from typing import Any

from shared.core.exceptions import EXCEPTIONS_BY_STATUS, AppException
from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def success_response(data: Any, message: str = "Success", status_code: str = AppStatusCode.DATA_RETRIEVED_SUCCESSFULLY):
    return JsonOutResult(
        success=True,
        data=data,
        status="Success",
        status_code=status_code,
        message=message
    )


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400, data: Any = None):
    exc_class = EXCEPTIONS_BY_STATUS.get(http_status, AppException)
    exc = exc_class(message, status_code=status_code, data=data)
    if exc_class is AppException:
        exc.status_code = http_status
    raise exc
