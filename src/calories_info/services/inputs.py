"""Validation of client payloads into typed inputs."""

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from calories_info.domain.errors import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: type[ModelT], payload: object) -> ModelT:
    """Validate ``payload`` or raise ``InputValidationError``."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InputValidationError(describe_validation_error(exc)) from exc


def describe_validation_error(exc: ValidationError) -> str:
    """Summarize the first validation problem without echoing input values."""
    errors = exc.errors(include_url=False, include_input=False)
    if not errors:
        return "Invalid input"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message
