from datetime import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator

from portal.core.clock import as_utc
from portal.core.config import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from portal.schemas.user import UserRead

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class AssignmentStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


class AssignmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    due_date: UtcDatetime = Field(alias="dueDate")

    check_blank = field_validator("title", "description")(_not_blank)

    class Config:
        populate_by_name = True


class AssignmentUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(
        default=None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH
    )
    due_date: Optional[UtcDatetime] = Field(default=None, alias="dueDate")

    check_blank = field_validator("title", "description")(_not_blank)

    class Config:
        populate_by_name = True


class AssignmentRead(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: str
    due_date: UtcDatetime = Field(alias="dueDate")
    created_at: UtcDatetime = Field(alias="createdAt")
    teacher: UserRead
    status: AssignmentStatus

    class Config:
        populate_by_name = True
