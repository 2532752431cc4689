"""Unit tests for UserRepository."""

from datetime import datetime

import pytest
from accounts.models import User
from accounts.repositories.user import UserRepository
from sqlalchemy import update
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` performs core persistence operations."""

    @pytest.fixture()
    def repo(self, session):
        return UserRepository()

    def test_find_by_username_or_email(self, repo):
        a = UserFactory(username="anna", email="anna@example.com")
        b = UserFactory(username="ben", email="ben@example.com")

        assert repo.find_by_username_or_email(username="anna").id == a.id
        assert repo.find_by_username_or_email(email="BEN@example.com").id == b.id
        # Either identifier matching is enough
        assert repo.find_by_username_or_email(username="zzz", email="ben@example.com").id == b.id
        assert repo.find_by_username_or_email(username="  ", email=None) is None
        assert repo.find_by_username_or_email(email="nobody@example.com") is None

    def test_exists_by_email_with_exclusion(self, repo):
        u = UserFactory(email="bob@example.com")

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("bob@example.com", exclude_id=u.id)
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_update_password_hash(self, repo, session):
        u = UserFactory()

        repo.update_password_hash(u, "new-hash")
        session.commit()
        session.expire_all()

        assert repo.get(u.id).password_hash == "new-hash"

    def test_update_rejects_non_whitelisted_fields(self, repo):
        u = UserFactory()

        with pytest.raises(ValueError):
            repo.update(u, password_hash="sneaky")
        with pytest.raises(ValueError):
            repo.update(u, refresh_token="sneaky")

    def test_set_and_clear_refresh_token(self, repo, session):
        u = UserFactory()

        assert repo.set_refresh_token(u.id, "rt-1") is True
        session.commit()
        assert repo.get(u.id).refresh_token == "rt-1"

        assert repo.set_refresh_token(u.id, None) is True
        session.commit()
        assert repo.get(u.id).refresh_token is None

        assert repo.set_refresh_token(424242, "rt") is False

    def test_refresh_token_write_moves_updated_at(self, repo, session):
        u = UserFactory()
        session.execute(
            update(User).where(User.id == u.id).values(updated_at=datetime(2000, 1, 1))
        )
        session.commit()

        repo.set_refresh_token(u.id, "rt-1")
        session.commit()
        session.expire_all()

        assert repo.get(u.id).updated_at.year > 2000

    def test_swap_refresh_token_is_conditional(self, repo, session):
        u = UserFactory(refresh_token="rt-1")

        assert repo.swap_refresh_token(u.id, expected="rt-1", new="rt-2") is True
        # A second swap from the same old value must lose
        assert repo.swap_refresh_token(u.id, expected="rt-1", new="rt-3") is False
        session.commit()
        session.expire_all()

        assert repo.get(u.id).refresh_token == "rt-2"
