"""
Input validation shared by the repositories.
"""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from retiros.core.exceptions import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def describe_errors(error: ValidationError) -> str:
    """Flatten a pydantic error into "field: message" pairs."""
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "input"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def validate_input(
    model_cls: Type[ModelT], data: Union[BaseModel, Mapping[str, Any]]
) -> ModelT:
    """
    Validate create/update input against its model.

    Model instances are re-validated so that values built with
    ``model_construct`` or mutated after construction are still checked.
    Mappings (for example decoded JSON) are validated in lax mode so that
    ids, dates and enum labels may arrive as strings.

    Args:
        model_cls: Input model class
        data: Model instance or mapping of field values

    Returns:
        A validated instance of ``model_cls``

    Raises:
        InputValidationError: If any field constraint is violated
    """
    try:
        if isinstance(data, BaseModel):
            return model_cls.model_validate(data.model_dump())
        return model_cls.model_validate(dict(data), strict=False)
    except ValidationError as e:
        raise InputValidationError(describe_errors(e)) from e
