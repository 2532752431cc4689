import pytest
from accounts.models.user import User
from accounts.uow import ReadOnlyViolation
from accounts.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from accounts.uow import SQLAlchemyUnitOfWork as RWuow
from sqlalchemy import func, select, text
from tests.factories.user import UserFactory


def _count(session) -> int:
    return session.execute(select(func.count()).select_from(User)).scalar_one()


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        session.expire_all()
        assert _count(session) == 1

    def test_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError), RWuow() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert _count(session) == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        UserFactory()

        with ROuow() as uow:
            assert uow.session.query(User).count() == 1

    def test_blocks_orm_flush_writes(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("DELETE FROM users"))

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(ReadOnlyViolation):
            uow.commit()

    def test_guards_removed_after_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())
        assert _count(session) == 1
