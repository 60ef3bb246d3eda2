"""Tests for the credential and token stores against in-memory SQLite."""

import unittest
from unittest.mock import patch

from blog_api.core.database import build_engine, build_session_factory
from blog_api.core.errors import DuplicateEmailError
from blog_api.models import Base, User, UserRole
from blog_api.services.credential_store import CredentialStore
from blog_api.services.token_store import TokenStore


class StoreTestCase(unittest.TestCase):
    """Fresh schema and session per test; bcrypt cost lowered for speed."""

    def setUp(self) -> None:
        patcher = patch("blog_api.core.security.BCRYPT_ROUNDS", 4)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.engine = build_engine("sqlite://")
        Base.metadata.create_all(self.engine)
        self.session = build_session_factory(self.engine)()
        self.addCleanup(self.engine.dispose)
        self.addCleanup(self.session.close)


class TestCredentialStore(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = CredentialStore(self.session)

    def _create(self, email: str = "alice@example.com", username: str = "user-alice") -> User:
        return self.store.create(
            username=username, email=email, password="s3cret-pass", role=UserRole.USER
        )

    def test_create_hashes_password(self) -> None:
        user = self._create()
        self.assertIsNotNone(user.id)
        self.assertEqual(user.role, "user")
        self.assertNotEqual(user.password_hash, "s3cret-pass")
        self.assertTrue(self.store.verify_password(user, "s3cret-pass"))
        self.assertFalse(self.store.verify_password(user, "other-pass"))

    def test_email_is_normalized(self) -> None:
        self._create(email="  Alice@Example.COM ")
        found = self.store.find_by_email("alice@example.com")
        self.assertIsNotNone(found)
        self.assertEqual(found.email, "alice@example.com")
        self.assertIsNotNone(self.store.find_by_email("ALICE@example.com"))

    def test_duplicate_email_is_rejected(self) -> None:
        self._create()
        with self.assertRaises(DuplicateEmailError):
            self._create(username="user-other")
        self.assertEqual(self.store.count_users(), 1)

    def test_duplicate_detected_at_unique_index(self) -> None:
        existing = self._create()
        with patch.object(self.store, "find_by_email", side_effect=[None, existing]):
            with self.assertRaises(DuplicateEmailError):
                self._create(username="user-racer")
        self.assertEqual(self.store.count_users(), 1)

    def test_lookup_by_id_and_username(self) -> None:
        user = self._create()
        self.assertEqual(self.store.find_by_id(user.id).email, "alice@example.com")
        self.assertIsNone(self.store.find_by_id(user.id + 100))
        self.assertTrue(self.store.username_exists("user-alice"))
        self.assertFalse(self.store.username_exists("user-nobody"))
        self.assertIsNone(self.store.find_by_email("nobody@example.com"))

    def test_list_users_paginates(self) -> None:
        for i in range(3):
            self._create(email=f"u{i}@example.com", username=f"user-{i}")
        page = self.store.list_users(limit=2, offset=1)
        self.assertEqual([u.email for u in page], ["u1@example.com", "u2@example.com"])
        self.assertEqual(self.store.count_users(), 3)


class TestTokenStore(StoreTestCase):
    def setUp(self) -> None:
        super().setUp()
        user = CredentialStore(self.session).create(
            username="user-owner", email="owner@example.com", password="s3cret-pass"
        )
        self.user_id = user.id
        self.store = TokenStore(self.session)

    def test_record_then_exists(self) -> None:
        record = self.store.record_issuance("token-a", self.user_id)
        self.assertEqual(record.user_id, self.user_id)
        self.assertIsNotNone(record.created_at)
        self.assertTrue(self.store.exists("token-a"))
        self.assertFalse(self.store.exists("token-b"))

    def test_empty_token_does_not_exist(self) -> None:
        self.assertFalse(self.store.exists(None))
        self.assertFalse(self.store.exists(""))

    def test_delete_revokes(self) -> None:
        self.store.record_issuance("token-a", self.user_id)
        self.store.record_issuance("token-b", self.user_id)
        self.assertTrue(self.store.delete("token-a"))
        self.assertFalse(self.store.exists("token-a"))
        self.assertTrue(self.store.exists("token-b"))
        self.assertFalse(self.store.delete("token-a"))


if __name__ == "__main__":
    unittest.main()
