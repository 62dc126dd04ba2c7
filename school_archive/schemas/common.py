"""Common schema utilities and base classes."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Attributes are snake_case like the store columns; every field is read
    and written on the wire under its camelCase alias. This is the single
    place where store names are mapped to API names.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


T = TypeVar("T")


class ApiResponse(BaseSchema, Generic[T]):
    """Standard response envelope."""

    status: Literal["success", "error"] = "success"
    message: str | None = None
    data: T | None = None


class MessageResponse(BaseSchema):
    """Envelope carrying only a message and an operator note."""

    status: Literal["success", "error"] = "success"
    message: str
    note: str | None = None


class ErrorResponse(BaseSchema):
    """Standard error response."""

    status: Literal["error"] = "error"
    message: str
    data: dict[str, Any] | None = None
