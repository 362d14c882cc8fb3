"""Client-side session: persisted token plus a snapshot of the signed-in user.

The store is the only thing that changes session state, and it only does so
in response to explicit calls (initialize, login, register, update_profile,
logout) or to the API client reporting a 401. Observers subscribe to
SessionEvent notifications; an INVALIDATED event is the cue for a UI to
send the user back to its login screen.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

import httpx

from client.api_client import AccountsClient, ApiError

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    UPDATED = "updated"
    INVALIDATED = "invalidated"


@dataclass
class SessionState:
    token: Optional[str] = None
    user: Optional[dict] = None

    @property
    def is_empty(self) -> bool:
        return not self.token


class SessionStorage(Protocol):
    def load(self) -> SessionState: ...
    def save(self, state: SessionState) -> None: ...
    def clear(self) -> None: ...


@dataclass
class MemorySessionStorage:
    """Keeps the session in memory. Used by tests and short-lived scripts."""
    state: SessionState = field(default_factory=SessionState)

    def load(self) -> SessionState:
        return SessionState(token=self.state.token, user=self.state.user)

    def save(self, state: SessionState) -> None:
        self.state = SessionState(token=state.token, user=state.user)

    def clear(self) -> None:
        self.state = SessionState()


class FileSessionStorage:
    """Persists the session as JSON on disk, readable only by the owner."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> SessionState:
        if not self.path.exists():
            return SessionState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable session file", extra={"path": str(self.path), "error": str(e)})
            return SessionState()
        if not isinstance(data, dict):
            return SessionState()
        return SessionState(token=data.get("token"), user=data.get("user"))

    def save(self, state: SessionState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps({"token": state.token, "user": state.user}), encoding="utf-8")
        os.chmod(tmp_path, 0o600)
        tmp_path.replace(self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


Listener = Callable[[SessionEvent, SessionState], None]


class SessionStore:
    def __init__(self, storage: SessionStorage, client_factory: Callable[..., AccountsClient]):
        """
        Args:
            storage: where the token and user snapshot are persisted
            client_factory: called with ``token_provider`` and ``on_unauthorized``
                keyword arguments; returns the AccountsClient to use
        """
        self._storage = storage
        self._state = SessionState()
        self._listeners: list[Listener] = []
        self.is_loading = True
        self.client = client_factory(
            token_provider=lambda: self._state.token,
            on_unauthorized=self._handle_unauthorized,
        )

    # ── state ────────────────────────────────────────────────

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def user(self) -> Optional[dict]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return not self._state.is_empty

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _emit(self, event: SessionEvent) -> None:
        snapshot = SessionState(token=self._state.token, user=self._state.user)
        for listener in list(self._listeners):
            listener(event, snapshot)

    def _set(self, token: Optional[str], user: Optional[dict]) -> None:
        self._state = SessionState(token=token, user=user)
        if self._state.is_empty:
            self._storage.clear()
        else:
            self._storage.save(self._state)

    # ── lifecycle ────────────────────────────────────────────

    def initialize(self) -> bool:
        """Load the stored session and revalidate it against the server.

        A stored token is not trusted until the profile endpoint accepts it.
        Returns True if a valid session was restored.
        """
        self.is_loading = True
        try:
            stored = self._storage.load()
            if stored.is_empty or stored.user is None:
                # Half-written state is as good as none
                self._storage.clear()
                return False

            self._state = stored
            try:
                profile = self.client.get_profile()
            except (ApiError, httpx.HTTPError) as e:
                # A 401 has already been handled by _handle_unauthorized
                logger.info("Stored session could not be revalidated", extra={"error": str(e)})
                self.invalidate()
                return False

            self._set(stored.token, profile)
            return True
        finally:
            self.is_loading = False

    def login(self, email: str, password: str) -> dict:
        data = self.client.login(email, password)
        self._set(data["token"], data["user"])
        self._emit(SessionEvent.LOGGED_IN)
        return data["user"]

    def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
    ) -> dict:
        data = self.client.register(first_name, last_name, email, password, phone)
        self._set(data["token"], data["user"])
        self._emit(SessionEvent.LOGGED_IN)
        return data["user"]

    def update_profile(self, **changes) -> dict:
        user = self.client.update_profile(**changes)
        self.update_user(user)
        return user

    def update_user(self, user: dict) -> None:
        """Replace the cached user snapshot, keeping the token."""
        self._set(self._state.token, user)
        self._emit(SessionEvent.UPDATED)

    def logout(self) -> None:
        self._set(None, None)
        self._emit(SessionEvent.LOGGED_OUT)

    def invalidate(self) -> None:
        """Drop the session because the server no longer accepts it."""
        had_session = self.is_authenticated
        self._set(None, None)
        if had_session:
            self._emit(SessionEvent.INVALIDATED)

    def _handle_unauthorized(self, error: ApiError) -> None:
        self.invalidate()
