# Helpers for building request schemas out of multipart form fields.
# Nested objects arrive as JSON-encoded strings next to the uploaded files.

import json
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_json_field(value: Optional[str], field: str) -> Any:
    """Decode a JSON form field. Empty values decode to None."""
    if value is None or value == "":
        return None
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid JSON in field '{field}'", {"field": field})


def build_model(model: Type[ModelT], data: dict) -> ModelT:
    """Validate a dict into a schema, raising the marketplace ValidationError on failure."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            "Validation failed",
            [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
        )
