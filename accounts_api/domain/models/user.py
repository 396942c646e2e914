"""User domain model — maps to the 'users' collection."""

from datetime import datetime
from typing import Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(BaseModel):
    """Populated view of a document in the 'roles' collection."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(alias="_id")
    name: Optional[str] = None


class AuditSnapshot(BaseModel):
    """Who performed a create/update/delete, frozen at the time it happened."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(alias="_id")
    email: str


class User(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    id: Optional[ObjectId] = Field(default=None, alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None  # bcrypt hash; excluded from list/detail reads
    phone: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    role: Union[Role, ObjectId, str, None] = None
    refresh_token: Optional[str] = None

    created_by: Optional[AuditSnapshot] = None
    updated_by: Optional[AuditSnapshot] = None
    deleted_by: Optional[AuditSnapshot] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    def __repr__(self):
        return f"<User {self.email}>"
