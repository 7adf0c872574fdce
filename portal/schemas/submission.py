from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portal.core.config import ANSWER_MAX_LENGTH
from portal.schemas.assignment import AssignmentRead, UtcDatetime
from portal.schemas.user import UserRead


class SubmissionCreate(BaseModel):
    assignment_id: str = Field(alias="assignmentId", min_length=1)
    answer: str = Field(min_length=1, max_length=ANSWER_MAX_LENGTH)

    @field_validator("answer")
    @classmethod
    def _answer_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    class Config:
        populate_by_name = True


class SubmissionRead(BaseModel):
    id: str = Field(alias="_id")
    assignment: AssignmentRead
    student: UserRead
    # read-only display: no length constraint here
    answer: str
    submitted_at: UtcDatetime = Field(alias="submittedAt")
    is_reviewed: bool = Field(default=False, alias="isReviewed")
    reviewed_at: Optional[UtcDatetime] = Field(default=None, alias="reviewedAt")

    class Config:
        populate_by_name = True
