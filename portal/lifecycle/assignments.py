"""
Assignment lifecycle: draft -> published -> completed.

Shared by the client (to decide which actions to offer) and by the
development backend (to reject invalid transitions authoritatively).
Functions take any object exposing ``status`` / ``due_date`` so they work on
both wire schemas and ORM rows.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from portal.core.clock import as_utc, utcnow
from portal.core.config import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from portal.core.errors import ConflictError
from portal.schemas.assignment import AssignmentStatus

PUBLISH = "publish"
COMPLETE = "complete"
EDIT = "edit"
DELETE = "delete"

TRANSITIONS: Dict[tuple, AssignmentStatus] = {
    (AssignmentStatus.DRAFT, PUBLISH): AssignmentStatus.PUBLISHED,
    (AssignmentStatus.PUBLISHED, COMPLETE): AssignmentStatus.COMPLETED,
}

STATUS_FILTERS = ("all",) + tuple(s.value for s in AssignmentStatus)


class InvalidTransition(ConflictError):
    pass


def _status(value) -> AssignmentStatus:
    return AssignmentStatus(value)


def can_transition(status, action: str) -> bool:
    return (_status(status), action) in TRANSITIONS


def next_status(status, action: str) -> AssignmentStatus:
    current = _status(status)
    target = TRANSITIONS.get((current, action))
    if target is None:
        if action == PUBLISH:
            raise InvalidTransition("Only draft assignments can be published")
        if action == COMPLETE:
            raise InvalidTransition("Only published assignments can be completed")
        raise InvalidTransition(f"Unknown action: {action}")
    return target


def can_edit(assignment) -> bool:
    return _status(assignment.status) == AssignmentStatus.DRAFT


def can_delete(assignment) -> bool:
    return _status(assignment.status) == AssignmentStatus.DRAFT


def available_actions(assignment) -> List[str]:
    actions = [action for (source, action) in TRANSITIONS if source == _status(assignment.status)]
    if can_edit(assignment):
        actions.append(EDIT)
    if can_delete(assignment):
        actions.append(DELETE)
    return actions


def is_overdue(assignment, now: Optional[datetime] = None) -> bool:
    """True once the wall clock is past the due date. Never cache this."""
    now = as_utc(now) if now is not None else utcnow()
    return now > as_utc(assignment.due_date)


def start_of_day(now: Optional[datetime] = None) -> datetime:
    # Midnight in the timezone ``now`` is expressed in (local time by default).
    now = now if now is not None else datetime.now().astimezone()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def due_date_error(due_date: Optional[datetime], now: Optional[datetime] = None) -> Optional[str]:
    if due_date is None:
        return "Due date is required"
    if as_utc(due_date) <= as_utc(start_of_day(now)):
        return "Due date must be in the future"
    return None


def _text_error(label: str, value: Optional[str], limit: int) -> Optional[str]:
    if value is None or not value.strip():
        return f"{label} is required"
    if len(value) > limit:
        return f"{label} must be less than {limit} characters"
    return None


def validate_new_assignment(
    title: Optional[str],
    description: Optional[str],
    due_date: Optional[datetime],
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Field name -> message. Empty when the assignment may be created."""
    errors: Dict[str, str] = {}
    for name, label, value, limit in (
        ("title", "Title", title, TITLE_MAX_LENGTH),
        ("description", "Description", description, DESCRIPTION_MAX_LENGTH),
    ):
        message = _text_error(label, value, limit)
        if message:
            errors[name] = message
    message = due_date_error(due_date, now)
    if message:
        errors["dueDate"] = message
    return errors


def validate_assignment_changes(
    title: Optional[str] = None,
    description: Optional[str] = None,
    due_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Like validate_new_assignment, but only for the fields being changed."""
    errors: Dict[str, str] = {}
    if title is not None:
        message = _text_error("Title", title, TITLE_MAX_LENGTH)
        if message:
            errors["title"] = message
    if description is not None:
        message = _text_error("Description", description, DESCRIPTION_MAX_LENGTH)
        if message:
            errors["description"] = message
    if due_date is not None:
        message = due_date_error(due_date, now)
        if message:
            errors["dueDate"] = message
    return errors


def status_counts(assignments: Iterable) -> Dict[str, int]:
    counts = {"total": 0, **{s.value: 0 for s in AssignmentStatus}}
    for assignment in assignments:
        counts["total"] += 1
        counts[_status(assignment.status).value] += 1
    return counts


def filter_by_status(assignments: Iterable, status_filter: str = "all") -> list:
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter}")
    if status_filter == "all":
        return list(assignments)
    return [a for a in assignments if _status(a.status).value == status_filter]
