"""Shared Pydantic schemas — response envelope and write results."""

from typing import Annotated, Any, Generic, TypeVar

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


ObjectIdStr = Annotated[str, BeforeValidator(_object_id_to_str)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope wrapped around every successful response."""

    status_code: int
    message: str
    data: T


class UpdateResult(CamelModel):
    acknowledged: bool = True
    matched_count: int
    modified_count: int


class DeleteResult(CamelModel):
    deleted: int
