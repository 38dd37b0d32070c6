import json
from typing import Optional, Tuple, Type

from fastapi import Request
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from ..schemas.parking.reservation_schemas import UploadedDocument

DOCUMENT_FIELD = "schedule_document"


async def read_request_payload(request: Request, file_field: str = DOCUMENT_FIELD) -> Tuple[dict, Optional[UploadedDocument]]:
    """Body of a JSON or multipart/form-data request plus its optional PDF."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        data, document = {}, None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key != file_field or not value.filename:
                    continue
                content = await value.read()
                # an empty file input counts as no attachment
                if content:
                    document = UploadedDocument(
                        filename=value.filename,
                        content_type=value.content_type,
                        content=content
                    )
            else:
                data[key] = value
        return data, document

    try:
        body = await request.body()
        data = json.loads(body) if body else {}
    except ValueError:
        return error_response(
            message="Invalid request format. Expected JSON or FormData.",
            status_code=AppStatusCode.INVALID_INPUT
        )

    if not isinstance(data, dict):
        return error_response(
            message="Invalid request format. Expected JSON or FormData.",
            status_code=AppStatusCode.INVALID_INPUT
        )
    return data, None


def parse_payload(model: Type[BaseModel], data: dict, required: Tuple[str, ...] = ()):
    missing = [field for field in required
               if data.get(field) is None or str(data.get(field)).strip() == ""]
    if missing:
        return error_response(
            message=f"Missing required fields: {', '.join(missing)}",
            status_code=AppStatusCode.REQUIRED_VALIDATION_ERROR
        )

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        messages = []
        for err in e.errors():
            field = ".".join(str(p) for p in err.get("loc", ()))
            # ShiftType.parse already names the field and the allowed values
            message = err.get("msg", "").removeprefix("Value error, ")
            messages.append(message if message.startswith("Invalid shift type")
                            else f"{field}: {message}")
        return error_response(
            message="; ".join(messages),
            status_code=AppStatusCode.INVALID_INPUT
        )
