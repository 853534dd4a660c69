"""Shared schema building blocks."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Serializes as camelCase; accepts camelCase or snake_case input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope: ``{data, message, code}``."""

    data: T | None = None
    message: str = "success"
    code: int = 200
