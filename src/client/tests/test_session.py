"""Tests for SessionStore and its storage backends."""

import json
import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient

from api.dependencies import get_user_repo
from api.main import app
from adapter.fake.user_repository import FakeUserRepository
from client.api_client import AccountsClient, ApiError
from client.session import (
    FileSessionStorage,
    MemorySessionStorage,
    SessionEvent,
    SessionState,
    SessionStore,
)


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        patcher = patch('services.password_service.BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.repo = FakeUserRepository()
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        self.http = TestClient(app)

        self.storage = MemorySessionStorage()
        self.events = []

    def tearDown(self):
        app.dependency_overrides.clear()

    def _store(self) -> SessionStore:
        store = SessionStore(self.storage, lambda **kwargs: AccountsClient(http_client=self.http, **kwargs))
        store.subscribe(lambda event, state: self.events.append(event))
        return store


class TestSessionLifecycle(SessionTestCase):

    def test_register_persists_session(self):
        store = self._store()

        user = store.register("Ana", "Silva", "ana@acme.io", "Secret123")

        self.assertTrue(store.is_authenticated)
        self.assertEqual(user["email"], "ana@acme.io")
        self.assertEqual(self.storage.state.token, store.token)
        self.assertEqual(self.events, [SessionEvent.LOGGED_IN])

    def test_login_then_logout(self):
        self._store().register("Ana", "Silva", "ana@acme.io", "Secret123")
        store = self._store()

        store.login("ana@acme.io", "Secret123")
        store.logout()

        self.assertFalse(store.is_authenticated)
        self.assertIsNone(store.user)
        self.assertTrue(self.storage.state.is_empty)
        self.assertEqual(self.events[-2:], [SessionEvent.LOGGED_IN, SessionEvent.LOGGED_OUT])

    def test_failed_login_keeps_state_empty(self):
        store = self._store()

        with self.assertRaises(ApiError):
            store.login("ana@acme.io", "Secret123")

        self.assertFalse(store.is_authenticated)
        self.assertEqual(self.events, [])

    def test_update_profile_refreshes_snapshot(self):
        store = self._store()
        store.register("Ana", "Silva", "ana@acme.io", "Secret123")

        store.update_profile(last_name="Costa")

        self.assertEqual(store.user["lastName"], "Costa")
        self.assertEqual(self.storage.state.user["lastName"], "Costa")
        self.assertEqual(self.events[-1], SessionEvent.UPDATED)

    def test_unsubscribe(self):
        store = self._store()
        seen = []
        unsubscribe = store.subscribe(lambda event, state: seen.append(event))
        unsubscribe()

        store.register("Ana", "Silva", "ana@acme.io", "Secret123")

        self.assertEqual(seen, [])


class TestSessionRevalidation(SessionTestCase):

    def test_initialize_restores_valid_session(self):
        self._store().register("Ana", "Silva", "ana@acme.io", "Secret123")
        token = self.storage.state.token
        self.repo.update(self.repo.get_by_email("ana@acme.io").id, {"first_name": "Bea"})

        store = self._store()
        self.assertTrue(store.is_loading)
        restored = store.initialize()

        self.assertTrue(restored)
        self.assertFalse(store.is_loading)
        self.assertEqual(store.token, token)
        # Snapshot comes from the server, not the stale copy on disk
        self.assertEqual(store.user["firstName"], "Bea")

    def test_initialize_with_nothing_stored(self):
        store = self._store()

        self.assertFalse(store.initialize())
        self.assertFalse(store.is_authenticated)
        self.assertFalse(store.is_loading)

    def test_initialize_with_partial_state_clears_it(self):
        self.storage.save(SessionState(token="abc", user=None))

        self.assertFalse(self._store().initialize())
        self.assertIsNone(self.storage.state.token)

    def test_rejected_token_invalidates(self):
        self.storage.save(SessionState(token="forged", user={"id": "x"}))
        store = self._store()

        self.assertFalse(store.initialize())

        self.assertFalse(store.is_authenticated)
        self.assertTrue(self.storage.state.is_empty)
        self.assertEqual(self.events, [SessionEvent.INVALIDATED])

    def test_deleted_account_invalidates(self):
        store = self._store()
        store.register("Ana", "Silva", "ana@acme.io", "Secret123")
        self.repo.store.clear()

        self.assertFalse(self._store().initialize())
        self.assertTrue(self.storage.state.is_empty)

    def test_network_failure_invalidates(self):
        self.storage.save(SessionState(token="abc", user={"id": "x"}))

        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        http = httpx.Client(base_url="http://api.test", transport=httpx.MockTransport(unreachable))
        store = SessionStore(self.storage, lambda **kwargs: AccountsClient(http_client=http, **kwargs))

        self.assertFalse(store.initialize())
        self.assertTrue(self.storage.state.is_empty)

    def test_401_during_use_invalidates(self):
        store = self._store()
        store.register("Ana", "Silva", "ana@acme.io", "Secret123")
        self.events.clear()
        self.assertEqual(store.client.list_users()["pagination"]["total"], 1)

        store._state = SessionState(token="expired-or-forged", user=store.user)
        with self.assertRaises(ApiError):
            store.client.get_profile()

        self.assertFalse(store.is_authenticated)
        self.assertEqual(self.events, [SessionEvent.INVALIDATED])


class TestFileSessionStorage(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.path = Path(self.tmpdir.name) / "nested" / "session.json"
        self.storage = FileSessionStorage(self.path)

    def test_save_and_load(self):
        self.storage.save(SessionState(token="abc", user={"id": "u1"}))

        loaded = FileSessionStorage(self.path).load()

        self.assertEqual(loaded.token, "abc")
        self.assertEqual(loaded.user, {"id": "u1"})
        self.assertEqual(json.loads(self.path.read_text())["token"], "abc")

    @unittest.skipIf(os.name == "nt", "POSIX permissions only")
    def test_file_is_private(self):
        self.storage.save(SessionState(token="abc", user={"id": "u1"}))
        self.assertEqual(stat.S_IMODE(self.path.stat().st_mode), 0o600)

    def test_load_missing_file(self):
        self.assertTrue(self.storage.load().is_empty)

    def test_load_corrupt_file(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json")
        self.assertTrue(self.storage.load().is_empty)

    def test_clear(self):
        self.storage.save(SessionState(token="abc", user={"id": "u1"}))
        self.storage.clear()
        self.storage.clear()
        self.assertFalse(self.path.exists())


if __name__ == '__main__':
    unittest.main()
