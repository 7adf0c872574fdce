"""
Session store: who is logged in, with which token.

State transitions go through ``session_reducer`` (pure); the store owns the
side effects: durable token storage, the client's Authorization header and
subscriber notification.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional, Protocol

from portal.client.api import ApiClient
from portal.core.errors import Outcome, PortalError, StorageError
from portal.schemas.user import UserRead

logger = logging.getLogger(__name__)

LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGOUT = "LOGOUT"
AUTH_ERROR = "AUTH_ERROR"
SET_LOADING = "SET_LOADING"

LOGIN_FAILED = "Login failed"
SESSION_NOT_SAVED = StorageError.default_message


class TokenStorage(Protocol):
    def load(self) -> Optional[str]: ...

    def save(self, token: str) -> None: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class SessionState:
    user: Optional[UserRead] = None
    token: Optional[str] = None
    is_authenticated: bool = False
    loading: bool = True


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


UNAUTHENTICATED = SessionState(loading=False)


def session_reducer(state: SessionState, action: Action) -> SessionState:
    if action.type == LOGIN_SUCCESS:
        return SessionState(
            user=action.payload["user"],
            token=action.payload["token"],
            is_authenticated=True,
            loading=False,
        )
    if action.type in (LOGOUT, AUTH_ERROR):
        return UNAUTHENTICATED
    if action.type == SET_LOADING:
        return replace(state, loading=bool(action.payload))
    return state


Listener = Callable[[SessionState], None]


class SessionStore:
    def __init__(self, api: ApiClient, storage: TokenStorage) -> None:
        self._api = api
        self._storage = storage
        self._listeners: List[Listener] = []
        self._login_pending = False

        token = storage.load()
        # With a stored token we stay loading until initialize() revalidates it.
        self._state = SessionState(token=token, loading=token is not None)
        self._api.set_token(token)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[UserRead]:
        return self._state.user

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def loading(self) -> bool:
        return self._state.loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _dispatch(self, action: Action) -> None:
        previous = self._state
        self._state = session_reducer(previous, action)
        if self._state.token != previous.token:
            self._api.set_token(self._state.token)
        if self._state != previous:
            for listener in list(self._listeners):
                listener(self._state)

    async def initialize(self) -> None:
        """Revalidate a persisted token. Never raises."""
        token = self._state.token
        if not token:
            self._dispatch(Action(SET_LOADING, False))
            return

        try:
            user = await self._api.me()
        except PortalError as exc:
            logger.info("stored session token rejected: %s", exc)
            if self._state.token == token:
                self._storage.clear()
                self._dispatch(Action(AUTH_ERROR))
            return

        # a login/logout that finished meanwhile wins
        if self._state.token != token:
            return
        self._dispatch(Action(LOGIN_SUCCESS, {"token": token, "user": user}))

    async def login(self, email: str, password: str) -> Outcome[None]:
        if self._login_pending:
            return Outcome.failure("Login already in progress")

        self._login_pending = True
        try:
            result = await self._api.login(email, password)
        except PortalError as exc:
            logger.info("login failed for %s: %s", email, exc)
            return Outcome.failure(exc.message or LOGIN_FAILED, exc)
        finally:
            self._login_pending = False

        try:
            self._storage.save(result.token)
        except OSError as exc:
            logger.warning("could not persist session token", exc_info=True)
            return Outcome.failure(SESSION_NOT_SAVED, StorageError(str(exc)))

        self._dispatch(Action(LOGIN_SUCCESS, {"token": result.token, "user": result.user}))
        logger.info("logged in as %s (%s)", result.user.email, result.user.role)
        return Outcome.success()

    def logout(self) -> None:
        self._storage.clear()
        self._dispatch(Action(LOGOUT))

    def close(self) -> None:
        self._listeners.clear()
