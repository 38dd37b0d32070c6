from datetime import date, datetime
import re
from pydantic import BaseModel, model_validator
from typing import Any, Union, get_args, get_origin

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200e\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively strip strings, drop invisible chars and turn blanks into None."""

    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    return value


def _is_date_annotation(annotation) -> bool:
    if annotation in (date, datetime):
        return True
    return get_origin(annotation) is Union and any(
        a in (date, datetime) for a in get_args(annotation))


class EmptyStringModel(BaseModel):
    """Base model for query strings and form payloads.

    Browsers send empty inputs as ``""``; those become ``None`` before
    validation so optional fields stay unset instead of failing to parse.
    Date fields keep pydantic's own parsing so a malformed date is still a
    validation error.
    """

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if not isinstance(values, dict):
            return values

        cleaned = deep_clean(values)
        for field_name, field in cls.model_fields.items():
            raw_value = cleaned.get(field_name)
            if _is_date_annotation(field.annotation) and isinstance(raw_value, datetime):
                cleaned[field_name] = raw_value.date()
        return cleaned
