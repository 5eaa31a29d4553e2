"""Input validation that surfaces pydantic errors as ValidationFailed"""

from typing import Type, TypeVar
from pydantic import BaseModel, ValidationError

from moviehub.errors import ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_input(model: Type[ModelT], **data) -> ModelT:
    """
    Build ``model`` from user input, raising ValidationFailed with the first
    error's own message (not pydantic's "Value error, ..." wrapper).
    """
    try:
        return model(**data)
    except ValidationError as exc:
        first = exc.errors()[0]
        original = (first.get("ctx") or {}).get("error")
        message = str(original) if original else first["msg"]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationFailed(message, field=field) from exc
