"""ORM rows -> wire schemas. Runs inside the request's DB session."""
from portal.backend.models.assignment import Assignment
from portal.backend.models.submission import Submission
from portal.backend.models.user import User
from portal.schemas.assignment import AssignmentRead
from portal.schemas.submission import SubmissionRead
from portal.schemas.user import UserRead


def user_out(user: User) -> UserRead:
    return UserRead(id=user.id, name=user.name, email=user.email, role=user.role)


def assignment_out(a: Assignment) -> AssignmentRead:
    return AssignmentRead(
        id=a.id,
        title=a.title,
        description=a.description,
        due_date=a.due_date,
        created_at=a.created_at,
        teacher=user_out(a.teacher),
        status=a.status,
    )


def submission_out(s: Submission) -> SubmissionRead:
    return SubmissionRead(
        id=s.id,
        assignment=assignment_out(s.assignment),
        student=user_out(s.student),
        answer=s.answer,
        submitted_at=s.submitted_at,
        is_reviewed=s.is_reviewed,
        reviewed_at=s.reviewed_at,
    )
