from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Set

from portal.client.api import ApiClient
from portal.core.clock import utcnow
from portal.core.errors import ConflictError, Outcome, PortalError, ValidationError
from portal.dashboards.notifications import Notifier
from portal.lifecycle.assignments import is_overdue
from portal.lifecycle.submissions import (
    can_submit,
    find_submission_for,
    review_status,
    submission_action,
    submission_status,
    validate_answer,
)
from portal.schemas.assignment import AssignmentRead
from portal.schemas.dashboard import MySubmissionRow, StudentAssignmentRow, StudentStats
from portal.schemas.submission import SubmissionRead

logger = logging.getLogger(__name__)

FETCH_FAILED = "Failed to fetch data"
SUBMIT_FAILED = "Failed to submit assignment"


class StudentDashboard:
    def __init__(
        self,
        api: ApiClient,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._api = api
        self.notifier = notifier or Notifier()
        self._clock = clock
        self._closed = False
        self._submitting: Set[str] = set()

        self.assignments: List[AssignmentRead] = []
        self.submissions: List[SubmissionRead] = []
        self.loading = True

    def close(self) -> None:
        self._closed = True

    def is_submitting(self, assignment_id: str) -> bool:
        return assignment_id in self._submitting

    async def load(self) -> Outcome[None]:
        """Fetch published assignments and own submissions together; both must succeed."""
        self.loading = True
        assignments, submissions = await asyncio.gather(
            self._api.list_assignments(),
            self._api.list_my_submissions(),
            return_exceptions=True,
        )
        failure = next(
            (r for r in (assignments, submissions) if isinstance(r, BaseException)), None
        )
        if failure is not None and not isinstance(failure, PortalError):
            raise failure

        if self._closed:
            return Outcome.failure(FETCH_FAILED, failure) if failure else Outcome.success()

        self.loading = False
        if failure is not None:
            self.notifier.error(FETCH_FAILED)
            return Outcome.failure(FETCH_FAILED, failure)

        self.assignments = assignments
        self.submissions = submissions
        return Outcome.success()

    def submission_for(self, assignment_id: str) -> Optional[SubmissionRead]:
        return find_submission_for(self.submissions, assignment_id)

    def _assignment(self, assignment_id: str) -> Optional[AssignmentRead]:
        return next((a for a in self.assignments if a.id == assignment_id), None)

    async def submit(self, assignment_id: str, answer: str) -> Outcome[SubmissionRead]:
        if assignment_id in self._submitting:
            return Outcome.failure("Submission already in progress")

        assignment = self._assignment(assignment_id)
        existing = self.submission_for(assignment_id)
        if existing is not None:
            return self._reject("You have already submitted this assignment")
        if assignment is not None and not can_submit(assignment, existing, self._clock()):
            return self._reject("Submission closed")

        message = validate_answer(answer)
        if message:
            return Outcome.failure(message, ValidationError(message, fields={"answer": message}))

        self._submitting.add(assignment_id)
        try:
            created = await self._api.create_submission(assignment_id, answer)
        except PortalError as exc:
            message = exc.message or SUBMIT_FAILED
            if not self._closed:
                self.notifier.error(message)
            return Outcome.failure(message, exc)
        finally:
            self._submitting.discard(assignment_id)

        if not self._closed:
            self.submissions = [created] + self.submissions
            self.notifier.success("Assignment submitted successfully")
        return Outcome.success(created)

    def _reject(self, message: str) -> Outcome:
        if not self._closed:
            self.notifier.error(message)
        return Outcome.failure(message, ConflictError(message))

    def stats(self) -> StudentStats:
        submitted = sum(1 for a in self.assignments if self.submission_for(a.id) is not None)
        return StudentStats(
            total_published=len(self.assignments),
            submitted=submitted,
            pending=len(self.assignments) - submitted,
        )

    def rows(self) -> List[StudentAssignmentRow]:
        now = self._clock()
        rows = []
        for assignment in self.assignments:
            submission = self.submission_for(assignment.id)
            rows.append(
                StudentAssignmentRow(
                    assignment=assignment,
                    submission=submission,
                    status=submission_status(assignment, submission, now).value,
                    action=submission_action(assignment, submission, now).value,
                    is_overdue=is_overdue(assignment, now),
                )
            )
        return rows

    def my_submissions(self) -> List[MySubmissionRow]:
        now = self._clock()
        return [
            MySubmissionRow(
                submission=s,
                review_status=review_status(s).value,
                is_overdue=is_overdue(s.assignment, now),
            )
            for s in self.submissions
        ]
