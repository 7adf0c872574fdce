from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.backend.core.deps import get_db
from portal.backend.core.permissions import require_student, require_teacher
from portal.backend.models.assignment import Assignment
from portal.backend.models.submission import Submission
from portal.backend.models.user import User
from portal.backend.serializers import submission_out
from portal.core.clock import utcnow
from portal.lifecycle.assignments import is_overdue
from portal.lifecycle.submissions import mark_reviewed
from portal.schemas.assignment import AssignmentStatus
from portal.schemas.submission import SubmissionCreate, SubmissionRead

router = APIRouter()

ALREADY_SUBMITTED = "You have already submitted this assignment"


@router.get("/submissions", response_model=list[SubmissionRead])
def list_my_submissions(
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    subs = (
        db.query(Submission)
        .filter(Submission.student_id == me.id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    return [submission_out(s) for s in subs]


@router.post(
    "/submissions",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_submission(
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
):
    assignment = db.query(Assignment).filter(Assignment.id == payload.assignment_id).first()
    # drafts are invisible to students
    if not assignment or assignment.status == AssignmentStatus.DRAFT.value:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.status != AssignmentStatus.PUBLISHED.value:
        raise HTTPException(status_code=409, detail="Assignment is not open for submissions")

    existing = (
        db.query(Submission)
        .filter(
            and_(
                Submission.assignment_id == assignment.id,
                Submission.student_id == me.id,
            )
        )
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail=ALREADY_SUBMITTED)

    now = utcnow()
    if is_overdue(assignment, now):
        raise HTTPException(status_code=409, detail="Assignment is overdue")

    s = Submission(
        assignment_id=assignment.id,
        student_id=me.id,
        answer=payload.answer,
        submitted_at=now,
    )
    db.add(s)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=ALREADY_SUBMITTED)

    db.refresh(s)
    return submission_out(s)


@router.put("/submissions/{submission_id}/review", response_model=SubmissionRead)
def review_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    sub = db.query(Submission).filter(Submission.id == submission_id).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Submission not found")

    if sub.assignment.teacher_id != teacher.id:
        raise HTTPException(status_code=403, detail="Only the assignment owner can review")

    # second review is a no-op: the first stamp stays
    if mark_reviewed(sub, utcnow()):
        db.commit()
        db.refresh(sub)

    return submission_out(sub)
