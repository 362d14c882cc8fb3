"""Unit tests for FakeUserRepository: verifies Port contract compliance."""

import unittest
from datetime import datetime, timedelta, timezone

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import DuplicateEmailError
from domain.model.user import User


class TestFakeUserRepository(unittest.TestCase):
    """Tests that FakeUserRepository correctly implements UserRepository Protocol."""

    def setUp(self):
        self.repo = FakeUserRepository()

    def _create(self, email='ana@acme.io', **kwargs):
        defaults = {'first_name': 'Ana', 'last_name': 'Silva', 'password_hash': 'hash'}
        defaults.update(kwargs)
        return self.repo.create(email=email, **defaults)

    # ── create + get ──────────────────────────────────────────

    def test_create_and_get_by_id(self):
        user = self._create(phone='5551234567')

        fetched = self.repo.get_by_id(user.id)
        self.assertIsInstance(fetched, User)
        self.assertEqual(fetched.email, 'ana@acme.io')
        self.assertEqual(fetched.phone, '5551234567')
        self.assertEqual(fetched.created_at, fetched.updated_at)

    def test_get_by_email(self):
        user = self._create()
        self.assertEqual(self.repo.get_by_email('ana@acme.io').id, user.id)
        self.assertIsNone(self.repo.get_by_email('nobody@acme.io'))

    def test_get_by_id_returns_none_for_missing(self):
        self.assertIsNone(self.repo.get_by_id('nonexistent'))

    def test_duplicate_email_raises(self):
        self._create()
        with self.assertRaises(DuplicateEmailError):
            self._create(first_name='Other')

    def test_ids_are_unique(self):
        first = self._create('a@acme.io')
        second = self._create('b@acme.io')
        self.assertNotEqual(first.id, second.id)

    # ── update ────────────────────────────────────────────────

    def test_update_allowed_fields(self):
        user = self._create()
        before = user.updated_at

        updated = self.repo.update(user.id, {'first_name': 'Bea', 'phone': None})

        self.assertEqual(updated.first_name, 'Bea')
        self.assertIsNone(updated.phone)
        self.assertGreaterEqual(updated.updated_at, before)

    def test_update_ignores_email(self):
        user = self._create()
        updated = self.repo.update(user.id, {'email': 'new@acme.io'})
        self.assertEqual(updated.email, 'ana@acme.io')

    def test_update_missing_returns_none(self):
        self.assertIsNone(self.repo.update('nonexistent', {'first_name': 'Bea'}))

    # ── find_many ─────────────────────────────────────────────

    def test_find_many_newest_first(self):
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        for i in range(3):
            user = self._create(f'u{i}@acme.io')
            user.created_at = base + timedelta(days=i)

        page = self.repo.find_many(skip=0, limit=2)

        self.assertEqual(page.total, 3)
        self.assertEqual([u.email for u in page.items], ['u2@acme.io', 'u1@acme.io'])

    def test_find_many_skip_past_end(self):
        self._create()
        page = self.repo.find_many(skip=10, limit=10)
        self.assertEqual(page.items, [])
        self.assertEqual(page.total, 1)


if __name__ == '__main__':
    unittest.main()
