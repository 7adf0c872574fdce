from typing import List, Optional

from pydantic import BaseModel

from portal.schemas.assignment import AssignmentRead
from portal.schemas.submission import SubmissionRead


class TeacherStats(BaseModel):
    total: int
    draft: int
    published: int
    completed: int


class TeacherAssignmentRow(BaseModel):
    assignment: AssignmentRead
    is_overdue: bool
    actions: List[str]


class ReviewRow(BaseModel):
    submission: SubmissionRead
    review_status: str
    can_mark_reviewed: bool


class StudentStats(BaseModel):
    total_published: int
    submitted: int
    pending: int


class StudentAssignmentRow(BaseModel):
    assignment: AssignmentRead
    submission: Optional[SubmissionRead] = None
    status: str  # "Submitted" | "Overdue" | "Available"
    action: str  # "submit" | "view" | "closed" | "unavailable"
    is_overdue: bool


class MySubmissionRow(BaseModel):
    submission: SubmissionRead
    review_status: str  # "Reviewed" | "Pending Review"
    is_overdue: bool
