"""
Thin async client for the assignment/submission backend.

Every method returns parsed schema objects or raises a ``PortalError``
subclass; callers decide how to surface the failure.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar

import httpx
import pydantic
from pydantic import BaseModel, TypeAdapter

from portal.core.config import API_URL, REQUEST_TIMEOUT_SECONDS
from portal.core.errors import NetworkError, error_from_pydantic, error_from_response
from portal.client.http_logging import EVENT_HOOKS
from portal.schemas.assignment import AssignmentCreate, AssignmentRead, AssignmentUpdate
from portal.schemas.submission import SubmissionCreate, SubmissionRead
from portal.schemas.user import LoginRequest, LoginResponse, MeResponse, UserRead

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_assignment_list = TypeAdapter(List[AssignmentRead])
_submission_list = TypeAdapter(List[SubmissionRead])


class ApiClient:
    def __init__(
        self,
        base_url: str = API_URL,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            event_hooks=EVENT_HOOKS,
        )

    # default Authorization header, kept in sync with the session token
    def set_token(self, token: Optional[str]) -> None:
        if token:
            self._http.headers["Authorization"] = f"Bearer {token}"
        else:
            self._http.headers.pop("Authorization", None)

    @property
    def authorization(self) -> Optional[str]:
        return self._http.headers.get("Authorization")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError() from exc

        if response.is_error:
            raise error_from_response(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError("Unexpected response from server") from exc

    @staticmethod
    def _parse(model: Type[M], data: Any) -> M:
        try:
            return model.model_validate(data)
        except pydantic.ValidationError as exc:
            raise NetworkError("Unexpected response from server") from exc

    @staticmethod
    def _parse_list(adapter: TypeAdapter, data: Any) -> list:
        try:
            return adapter.validate_python(data)
        except pydantic.ValidationError as exc:
            raise NetworkError("Unexpected response from server") from exc

    @staticmethod
    def _payload(model: Type[M], **values) -> dict:
        # Local shape/length validation: no request leaves on bad input.
        try:
            payload = model(**values)
        except pydantic.ValidationError as exc:
            raise error_from_pydantic(exc) from exc
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)

    # auth

    async def me(self) -> UserRead:
        data = await self._request("GET", "/auth/me")
        return self._parse(MeResponse, data).user

    async def login(self, email: str, password: str) -> LoginResponse:
        payload = self._payload(LoginRequest, email=email, password=password)
        data = await self._request("POST", "/auth/login", json=payload)
        return self._parse(LoginResponse, data)

    # assignments

    async def list_assignments(self) -> List[AssignmentRead]:
        data = await self._request("GET", "/assignments")
        return self._parse_list(_assignment_list, data)

    async def create_assignment(
        self, title: str, description: str, due_date: datetime
    ) -> AssignmentRead:
        payload = self._payload(
            AssignmentCreate, title=title, description=description, due_date=due_date
        )
        data = await self._request("POST", "/assignments", json=payload)
        return self._parse(AssignmentRead, data)

    async def update_assignment(
        self,
        assignment_id: str,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
    ) -> AssignmentRead:
        payload = self._payload(
            AssignmentUpdate, title=title, description=description, due_date=due_date
        )
        data = await self._request("PUT", f"/assignments/{assignment_id}", json=payload)
        return self._parse(AssignmentRead, data)

    async def delete_assignment(self, assignment_id: str) -> None:
        await self._request("DELETE", f"/assignments/{assignment_id}")

    async def publish_assignment(self, assignment_id: str) -> AssignmentRead:
        data = await self._request("PUT", f"/assignments/{assignment_id}/publish")
        return self._parse(AssignmentRead, data)

    async def complete_assignment(self, assignment_id: str) -> AssignmentRead:
        data = await self._request("PUT", f"/assignments/{assignment_id}/complete")
        return self._parse(AssignmentRead, data)

    async def list_assignment_submissions(self, assignment_id: str) -> List[SubmissionRead]:
        data = await self._request("GET", f"/assignments/{assignment_id}/submissions")
        return self._parse_list(_submission_list, data)

    # submissions

    async def list_my_submissions(self) -> List[SubmissionRead]:
        data = await self._request("GET", "/submissions")
        return self._parse_list(_submission_list, data)

    async def create_submission(self, assignment_id: str, answer: str) -> SubmissionRead:
        payload = self._payload(SubmissionCreate, assignment_id=assignment_id, answer=answer)
        data = await self._request("POST", "/submissions", json=payload)
        return self._parse(SubmissionRead, data)

    async def review_submission(self, submission_id: str) -> SubmissionRead:
        data = await self._request("PUT", f"/submissions/{submission_id}/review")
        return self._parse(SubmissionRead, data)
