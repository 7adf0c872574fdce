"""
Teacher-facing controllers: the assignment dashboard and the per-assignment
review view.

Caches are only ever patched with the objects the server returns.
"""
from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable, List, Optional

from portal.client.api import ApiClient
from portal.core.clock import utcnow
from portal.core.errors import Outcome, PortalError, ValidationError
from portal.dashboards.notifications import Notifier
from portal.lifecycle import assignments as lifecycle
from portal.lifecycle.submissions import can_mark_reviewed, review_status
from portal.schemas.assignment import AssignmentRead
from portal.schemas.dashboard import ReviewRow, TeacherAssignmentRow, TeacherStats
from portal.schemas.submission import SubmissionRead

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TeacherDashboard:
    def __init__(
        self,
        api: ApiClient,
        notifier: Optional[Notifier] = None,
        clock: Clock = utcnow,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self._api = api
        self.notifier = notifier or Notifier()
        self._clock = clock
        # None means the machine's local timezone
        self._tz = tz
        self._closed = False

        self.assignments: List[AssignmentRead] = []
        self.loading = True
        self.status_filter = "all"

    def close(self) -> None:
        self._closed = True

    def _local_now(self) -> datetime:
        return self._clock().astimezone(self._tz)

    def _find(self, assignment_id: str) -> Optional[AssignmentRead]:
        return next((a for a in self.assignments if a.id == assignment_id), None)

    def _replace(self, updated: AssignmentRead) -> None:
        self.assignments = [updated if a.id == updated.id else a for a in self.assignments]

    async def _mutate(self, request, *, apply, success: str, failure: str) -> Outcome:
        try:
            result = await request
        except PortalError as exc:
            message = exc.message or failure
            if not self._closed:
                self.notifier.error(message)
            return Outcome.failure(message, exc)

        if self._closed:
            logger.debug("dashboard closed, dropping result of %r", success)
            return Outcome.success(result)
        apply(result)
        self.notifier.success(success)
        return Outcome.success(result)

    async def load(self) -> Outcome[List[AssignmentRead]]:
        self.loading = True
        try:
            assignments = await self._api.list_assignments()
        except PortalError as exc:
            if not self._closed:
                self.loading = False
                self.notifier.error("Failed to fetch assignments")
            return Outcome.failure("Failed to fetch assignments", exc)

        if not self._closed:
            self.assignments = assignments
            self.loading = False
        return Outcome.success(assignments)

    async def create_assignment(
        self, title: str, description: str, due_date: Optional[datetime]
    ) -> Outcome[AssignmentRead]:
        errors = lifecycle.validate_new_assignment(title, description, due_date, self._local_now())
        if errors:
            # inline field errors, nothing sent
            return Outcome.failure(next(iter(errors.values())), ValidationError(fields=errors))

        return await self._mutate(
            self._api.create_assignment(title, description, due_date),
            apply=lambda created: self.assignments.insert(0, created),
            success="Assignment created successfully",
            failure="Failed to create assignment",
        )

    async def update_assignment(
        self,
        assignment_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> Outcome[AssignmentRead]:
        current = self._find(assignment_id)
        if current is not None and not lifecycle.can_edit(current):
            return self._reject("Only draft assignments can be edited")

        errors = lifecycle.validate_assignment_changes(title, description, due_date, self._local_now())
        if errors:
            return Outcome.failure(next(iter(errors.values())), ValidationError(fields=errors))

        return await self._mutate(
            self._api.update_assignment(
                assignment_id, title=title, description=description, due_date=due_date
            ),
            apply=self._replace,
            success="Assignment updated successfully",
            failure="Failed to update assignment",
        )

    async def delete_assignment(self, assignment_id: str) -> Outcome[None]:
        current = self._find(assignment_id)
        if current is not None and not lifecycle.can_delete(current):
            return self._reject("Only draft assignments can be deleted")

        def drop(_):
            self.assignments = [a for a in self.assignments if a.id != assignment_id]

        return await self._mutate(
            self._api.delete_assignment(assignment_id),
            apply=drop,
            success="Assignment deleted successfully",
            failure="Failed to delete assignment",
        )

    async def publish(self, assignment_id: str) -> Outcome[AssignmentRead]:
        return await self._transition(
            assignment_id,
            lifecycle.PUBLISH,
            self._api.publish_assignment,
            success="Assignment published successfully",
            failure="Failed to publish assignment",
        )

    async def complete(self, assignment_id: str) -> Outcome[AssignmentRead]:
        return await self._transition(
            assignment_id,
            lifecycle.COMPLETE,
            self._api.complete_assignment,
            success="Assignment marked as completed",
            failure="Failed to complete assignment",
        )

    async def _transition(self, assignment_id, action, call, *, success, failure) -> Outcome:
        current = self._find(assignment_id)
        if current is not None:
            try:
                lifecycle.next_status(current.status, action)
            except lifecycle.InvalidTransition as exc:
                return self._reject(str(exc), exc)

        return await self._mutate(
            call(assignment_id), apply=self._replace, success=success, failure=failure
        )

    def _reject(self, message: str, error: Optional[PortalError] = None) -> Outcome:
        error = error or lifecycle.InvalidTransition(message)
        if not self._closed:
            self.notifier.error(message)
        return Outcome.failure(message, error)

    def set_filter(self, status_filter: str) -> None:
        if status_filter not in lifecycle.STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status_filter}")
        self.status_filter = status_filter

    def filtered(self) -> List[AssignmentRead]:
        return lifecycle.filter_by_status(self.assignments, self.status_filter)

    def stats(self) -> TeacherStats:
        return TeacherStats(**lifecycle.status_counts(self.assignments))

    def rows(self) -> List[TeacherAssignmentRow]:
        now = self._clock()
        return [
            TeacherAssignmentRow(
                assignment=a,
                is_overdue=lifecycle.is_overdue(a, now),
                actions=lifecycle.available_actions(a),
            )
            for a in self.filtered()
        ]


class AssignmentDetails:
    """Submissions for one assignment, with the teacher's review action."""

    def __init__(self, api: ApiClient, assignment: AssignmentRead, notifier: Optional[Notifier] = None) -> None:
        self._api = api
        self.assignment = assignment
        self.notifier = notifier or Notifier()
        self.submissions: List[SubmissionRead] = []
        self.loading = False
        self._closed = False

    def close(self) -> None:
        self._closed = True

    async def load(self) -> Outcome[List[SubmissionRead]]:
        self.loading = True
        try:
            submissions = await self._api.list_assignment_submissions(self.assignment.id)
        except PortalError as exc:
            if not self._closed:
                self.loading = False
                self.notifier.error("Failed to fetch submissions")
            return Outcome.failure("Failed to fetch submissions", exc)

        if not self._closed:
            self.submissions = submissions
            self.loading = False
        return Outcome.success(submissions)

    async def mark_reviewed(self, submission_id: str) -> Outcome[SubmissionRead]:
        cached = next((s for s in self.submissions if s.id == submission_id), None)
        if cached is not None and not can_mark_reviewed(cached):
            return Outcome.success(cached)

        try:
            reviewed = await self._api.review_submission(submission_id)
        except PortalError as exc:
            if not self._closed:
                self.notifier.error("Failed to mark submission as reviewed")
            return Outcome.failure("Failed to mark submission as reviewed", exc)

        if not self._closed:
            self.submissions = [reviewed if s.id == reviewed.id else s for s in self.submissions]
            self.notifier.success("Submission marked as reviewed")
        return Outcome.success(reviewed)

    def rows(self) -> List[ReviewRow]:
        return [
            ReviewRow(
                submission=s,
                review_status=review_status(s).value,
                can_mark_reviewed=can_mark_reviewed(s),
            )
            for s in self.submissions
        ]
