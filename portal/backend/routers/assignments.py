from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from portal.backend.core.current_user import get_current_user
from portal.backend.core.deps import get_db
from portal.backend.core.permissions import require_teacher
from portal.backend.models.assignment import Assignment
from portal.backend.models.submission import Submission
from portal.backend.models.user import User
from portal.backend.serializers import assignment_out, submission_out
from portal.core.clock import utcnow
from portal.lifecycle import assignments as lifecycle
from portal.schemas.assignment import (
    AssignmentCreate,
    AssignmentRead,
    AssignmentStatus,
    AssignmentUpdate,
)
from portal.schemas.submission import SubmissionRead

router = APIRouter()


def _owned_assignment(db: Session, assignment_id: str, teacher: User) -> Assignment:
    a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
    if not a:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if a.teacher_id != teacher.id:
        raise HTTPException(status_code=403, detail="Only the assignment owner can do that")
    return a


def _check_due_date(due_date) -> None:
    message = lifecycle.due_date_error(due_date, utcnow())
    if message:
        raise HTTPException(status_code=400, detail=message)


@router.get("/assignments", response_model=list[AssignmentRead])
def list_assignments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Assignment)
    # teachers see their own, students see what is published
    if current_user.role == "teacher":
        query = query.filter(Assignment.teacher_id == current_user.id)
    else:
        query = query.filter(Assignment.status == AssignmentStatus.PUBLISHED.value)

    return [assignment_out(a) for a in query.order_by(Assignment.created_at.desc()).all()]


@router.post(
    "/assignments",
    response_model=AssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_assignment(
    payload: AssignmentCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    _check_due_date(payload.due_date)

    a = Assignment(
        teacher_id=teacher.id,
        title=payload.title,
        description=payload.description,
        due_date=payload.due_date,
        status=AssignmentStatus.DRAFT.value,
    )
    db.add(a)
    db.commit()
    db.refresh(a)
    return assignment_out(a)


@router.put("/assignments/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = _owned_assignment(db, assignment_id, teacher)
    if not lifecycle.can_edit(a):
        raise HTTPException(status_code=409, detail="Only draft assignments can be edited")

    if payload.due_date is not None:
        _check_due_date(payload.due_date)
        a.due_date = payload.due_date
    if payload.title is not None:
        a.title = payload.title
    if payload.description is not None:
        a.description = payload.description

    db.commit()
    db.refresh(a)
    return assignment_out(a)


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    a = _owned_assignment(db, assignment_id, teacher)
    if not lifecycle.can_delete(a):
        raise HTTPException(status_code=409, detail="Only draft assignments can be deleted")

    db.delete(a)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _transition(db: Session, assignment_id: str, teacher: User, action: str) -> AssignmentRead:
    a = _owned_assignment(db, assignment_id, teacher)
    try:
        a.status = lifecycle.next_status(a.status, action).value
    except lifecycle.InvalidTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    db.commit()
    db.refresh(a)
    return assignment_out(a)


@router.put("/assignments/{assignment_id}/publish", response_model=AssignmentRead)
def publish_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return _transition(db, assignment_id, teacher, lifecycle.PUBLISH)


@router.put("/assignments/{assignment_id}/complete", response_model=AssignmentRead)
def complete_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    return _transition(db, assignment_id, teacher, lifecycle.COMPLETE)


@router.get(
    "/assignments/{assignment_id}/submissions",
    response_model=list[SubmissionRead],
)
def list_submissions_for_assignment(
    assignment_id: str,
    db: Session = Depends(get_db),
    teacher: User = Depends(require_teacher),
):
    _owned_assignment(db, assignment_id, teacher)

    subs = (
        db.query(Submission)
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc())
        .all()
    )
    return [submission_out(s) for s in subs]
