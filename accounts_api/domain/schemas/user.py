"""Pydantic schemas for the User domain."""

from datetime import datetime
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

from accounts_api.domain.models.user import User
from accounts_api.domain.schemas.common import CamelModel, ObjectIdStr

# Vietnamese mobile numbers: 0 or +84 followed by a carrier prefix and 7 digits
PHONE_PATTERN = r"^(0|\+84)(3[2-9]|5[6|8|9]|7[0|6-9]|8[1-5]|9[0-9])[0-9]{7}$"

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
PhoneStr = Annotated[str, StringConstraints(min_length=10, max_length=10, pattern=PHONE_PATTERN)]


class UserCreate(BaseModel):
    name: NonEmptyStr = Field(examples=["Nguyen Van A"])
    email: EmailStr = Field(examples=["nguyenvana@example.com"])
    password: NonEmptyStr = Field(examples=["password123"])
    phone: PhoneStr = Field(examples=["0912345678"])
    age: int = Field(ge=0, examples=[25])
    gender: NonEmptyStr = Field(examples=["male"])
    address: NonEmptyStr = Field(examples=["123 Main St, City, Country"])
    role: NonEmptyStr = Field(examples=["user"])


class UserUpdate(BaseModel):
    """Partial update. Email is accepted here only so it can be refused as immutable."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[NonEmptyStr] = None
    email: Optional[str] = None
    phone: Optional[PhoneStr] = None
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[NonEmptyStr] = None
    address: Optional[NonEmptyStr] = None
    role: Optional[NonEmptyStr] = None


class RoleRead(CamelModel):
    id: ObjectIdStr = Field(alias="_id")
    name: Optional[str] = None


class AuditSnapshotRead(CamelModel):
    id: ObjectIdStr = Field(alias="_id")
    email: str


class UserRead(CamelModel):
    id: ObjectIdStr = Field(alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    role: Union[RoleRead, ObjectIdStr, None] = None
    created_by: Optional[AuditSnapshotRead] = None
    updated_by: Optional[AuditSnapshotRead] = None
    deleted_by: Optional[AuditSnapshotRead] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls.model_validate(user.model_dump(by_alias=True))


class PageMeta(CamelModel):
    current: int
    page_size: int
    pages: int
    total: int


class UserPage(CamelModel):
    meta: PageMeta
    result: List[UserRead]
