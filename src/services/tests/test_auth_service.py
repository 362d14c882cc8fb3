"""Unit tests for auth_service module."""

import threading
import unittest
from unittest.mock import patch

from adapter.fake.user_repository import FakeUserRepository
from domain.model.errors import DuplicateEmailError, InvalidCredentialsError, ValidationError
from services.auth_service import login, register
from services.password_service import verify_password
from services.token_service import verify_token


class AuthServiceTestCase(unittest.TestCase):

    def setUp(self):
        patcher = patch('services.password_service.BCRYPT_ROUNDS', 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.repo = FakeUserRepository()

    def _register(self, **overrides):
        kwargs = {
            'first_name': 'Ana',
            'last_name': 'Silva',
            'email': 'ana@acme.io',
            'password': 'Secret123',
        }
        kwargs.update(overrides)
        return register(self.repo, **kwargs)


class TestRegister(AuthServiceTestCase):

    def test_register_creates_user_and_token(self):
        result = self._register(phone='5551234567')

        self.assertEqual(result.user.first_name, 'Ana')
        self.assertEqual(result.user.phone, '5551234567')
        claim = verify_token(result.token)
        self.assertEqual(claim.user_id, result.user.id)
        self.assertEqual(claim.email, 'ana@acme.io')

    def test_password_is_stored_hashed(self):
        result = self._register()
        stored = self.repo.get_by_id(result.user.id)

        self.assertNotEqual(stored.password_hash, 'Secret123')
        self.assertTrue(verify_password('Secret123', stored.password_hash))

    def test_email_is_normalized(self):
        result = self._register(email='  Ana@ACME.io ')
        self.assertEqual(result.user.email, 'ana@acme.io')

    def test_names_are_trimmed(self):
        result = self._register(first_name='  Ana ', last_name=' Silva  ')
        self.assertEqual(result.user.first_name, 'Ana')
        self.assertEqual(result.user.last_name, 'Silva')

    def test_blank_phone_treated_as_absent(self):
        result = self._register(phone='')
        self.assertIsNone(result.user.phone)

    def test_duplicate_email_rejected(self):
        self._register()
        with self.assertRaises(DuplicateEmailError):
            self._register(email='ANA@acme.io', first_name='Other')
        self.assertEqual(len(self.repo.store), 1)

    def test_all_field_errors_reported_together(self):
        with self.assertRaises(ValidationError) as ctx:
            self._register(first_name='A', last_name='', email='bad', password='short', phone='123')

        fields = {e['field'] for e in ctx.exception.errors}
        self.assertEqual(fields, {'firstName', 'lastName', 'email', 'password', 'phone'})
        self.assertEqual(len(self.repo.store), 0)

    def test_concurrent_registration_creates_one_account(self):
        outcomes = []
        barrier = threading.Barrier(5)

        def attempt():
            barrier.wait()
            try:
                self._register()
                outcomes.append('created')
            except DuplicateEmailError:
                outcomes.append('duplicate')

        threads = [threading.Thread(target=attempt) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(outcomes.count('created'), 1)
        self.assertEqual(outcomes.count('duplicate'), 4)
        self.assertEqual(len(self.repo.store), 1)


class TestLogin(AuthServiceTestCase):

    def setUp(self):
        super().setUp()
        self.registered = self._register()

    def test_login_success(self):
        result = login(self.repo, 'ana@acme.io', 'Secret123')
        self.assertEqual(result.user.id, self.registered.user.id)
        self.assertEqual(verify_token(result.token).user_id, self.registered.user.id)

    def test_login_email_case_insensitive(self):
        result = login(self.repo, ' ANA@Acme.io', 'Secret123')
        self.assertEqual(result.user.id, self.registered.user.id)

    def test_wrong_password_and_unknown_email_look_the_same(self):
        with self.assertRaises(InvalidCredentialsError) as wrong_password:
            login(self.repo, 'ana@acme.io', 'Secret124')
        with self.assertRaises(InvalidCredentialsError) as unknown_email:
            login(self.repo, 'nobody@acme.io', 'Secret123')

        self.assertEqual(str(wrong_password.exception), str(unknown_email.exception))
        self.assertEqual(str(wrong_password.exception), 'Invalid email or password')

    def test_missing_password_is_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            login(self.repo, 'ana@acme.io', '')
        self.assertEqual(ctx.exception.errors[0]['field'], 'password')

    def test_malformed_email_is_validation_error(self):
        with self.assertRaises(ValidationError):
            login(self.repo, 'ana', 'Secret123')


if __name__ == '__main__':
    unittest.main()
