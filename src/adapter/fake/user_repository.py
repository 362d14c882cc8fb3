"""In-memory implementation of UserRepository for testing."""

import threading
import uuid
from datetime import datetime, timezone

from domain.model.errors import DuplicateEmailError
from domain.model.user import User, UserPage

_UPDATABLE_FIELDS = {'first_name', 'last_name', 'phone', 'password_hash'}


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}
        # Stands in for the unique index: check and insert happen under one lock.
        self._lock = threading.Lock()

    # ── write operations ─────────────────────────────────────

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        phone: str | None = None,
    ) -> User:
        with self._lock:
            if any(u.email == email for u in self.store.values()):
                raise DuplicateEmailError(email)

            user_id = uuid.uuid4().hex
            now = datetime.now(timezone.utc)

            user = User(
                id=user_id,
                first_name=first_name,
                last_name=last_name,
                email=email,
                phone=phone,
                created_at=now,
                updated_at=now,
                password_hash=password_hash,
            )
            self.store[user_id] = user
            return user

    def update(self, user_id: str, fields: dict) -> User | None:
        with self._lock:
            user = self.store.get(user_id)
            if not user:
                return None

            for key, value in fields.items():
                if key in _UPDATABLE_FIELDS:
                    setattr(user, key, value)
            user.updated_at = max(datetime.now(timezone.utc), user.created_at)
            return user

    # ── read operations ──────────────────────────────────────

    def get_by_email(self, email: str) -> User | None:
        for user in list(self.store.values()):
            if user.email == email:
                return user
        return None

    def get_by_id(self, user_id: str) -> User | None:
        return self.store.get(user_id)

    def find_many(self, skip: int = 0, limit: int = 10) -> UserPage:
        ordered = sorted(list(self.store.values()), key=lambda u: u.created_at, reverse=True)
        return UserPage(items=ordered[skip:skip + limit], total=len(ordered))
