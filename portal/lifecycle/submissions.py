"""
Submission lifecycle: may a student submit, what badge to show, and the
one-way unreviewed -> reviewed transition.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from portal.core.clock import utcnow
from portal.core.config import ANSWER_MAX_LENGTH
from portal.lifecycle.assignments import is_overdue
from portal.schemas.assignment import AssignmentStatus


class SubmissionStatus(str, Enum):
    SUBMITTED = "Submitted"
    OVERDUE = "Overdue"
    AVAILABLE = "Available"


class ReviewStatus(str, Enum):
    REVIEWED = "Reviewed"
    PENDING = "Pending Review"


class SubmissionAction(str, Enum):
    SUBMIT = "submit"
    VIEW = "view"
    CLOSED = "closed"
    UNAVAILABLE = "unavailable"


def assignment_id_of(submission) -> str:
    assignment = getattr(submission, "assignment", None)
    if assignment is not None:
        return assignment.id
    return submission.assignment_id


def find_submission_for(submissions: Iterable, assignment_id: str):
    for submission in submissions:
        if assignment_id_of(submission) == assignment_id:
            return submission
    return None


def can_submit(assignment, existing_submission=None, now: Optional[datetime] = None) -> bool:
    # No resubmission and no late submission: both block permanently.
    return existing_submission is None and not is_overdue(assignment, now)


def submission_status(assignment, submission=None, now: Optional[datetime] = None) -> SubmissionStatus:
    if submission is not None:
        return SubmissionStatus.SUBMITTED
    if is_overdue(assignment, now):
        return SubmissionStatus.OVERDUE
    return SubmissionStatus.AVAILABLE


def submission_action(assignment, submission=None, now: Optional[datetime] = None) -> SubmissionAction:
    if submission is not None:
        return SubmissionAction.VIEW
    if is_overdue(assignment, now):
        return SubmissionAction.CLOSED
    if AssignmentStatus(assignment.status) != AssignmentStatus.PUBLISHED:
        return SubmissionAction.UNAVAILABLE
    return SubmissionAction.SUBMIT


def review_status(submission) -> ReviewStatus:
    return ReviewStatus.REVIEWED if submission.is_reviewed else ReviewStatus.PENDING


def can_mark_reviewed(submission) -> bool:
    return not submission.is_reviewed


def mark_reviewed(submission, now: Optional[datetime] = None) -> bool:
    """Stamp the submission reviewed in place.

    Returns False (and leaves the existing stamp alone) when it already was.
    """
    if not can_mark_reviewed(submission):
        return False
    submission.is_reviewed = True
    submission.reviewed_at = now if now is not None else utcnow()
    return True


def validate_answer(answer: Optional[str]) -> Optional[str]:
    """Message for a bad answer on creation, None when acceptable."""
    if answer is None or not answer.strip():
        return "Answer is required"
    if len(answer) > ANSWER_MAX_LENGTH:
        return f"Answer must be less than {ANSWER_MAX_LENGTH} characters"
    return None
