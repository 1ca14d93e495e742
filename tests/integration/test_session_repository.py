from datetime import timedelta

import pytest
import pytest_asyncio

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.sessions import CleanupExpiredSessionsUseCase
from src.domain.base import sha256_hex, utc_now
from src.domain.entities import Session, User


@pytest_asyncio.fixture
async def user(db_session):
    user = User(external_id=42, first_name="Ivan")
    db_session.add(user)
    await db_session.commit()
    return user


def make_session(user, key, **overrides):
    values = dict(
        user_id=user.id,
        token_hash=sha256_hex(key),
        session_key=key,
        expires_at=utc_now() + timedelta(days=7),
    )
    values.update(overrides)
    return Session(**values)


@pytest.mark.asyncio
async def test_claim_for_rotation_succeeds_once(db_session, user):
    uow = SqlAlchemyUnitOfWork(db_session)
    async with uow:
        await uow.sessions.create(make_session(user, "key-1"))
        await uow.commit()

    async with uow:
        first = await uow.sessions.claim_for_rotation("key-1")
        second = await uow.sessions.claim_for_rotation("key-1")
        await uow.commit()

    assert first is True
    assert second is False


@pytest.mark.asyncio
async def test_find_by_token_skips_revoked_and_expired(db_session, user):
    uow = SqlAlchemyUnitOfWork(db_session)
    async with uow:
        await uow.sessions.create(make_session(user, "live"))
        await uow.sessions.create(
            make_session(user, "revoked", is_revoked=True, revoked_at=utc_now())
        )
        await uow.sessions.create(
            make_session(user, "expired", expires_at=utc_now() - timedelta(seconds=1))
        )
        await uow.commit()

    async with uow:
        assert (await uow.sessions.find_by_token("live")).session_key == "live"
        assert await uow.sessions.find_by_token("revoked") is None
        assert await uow.sessions.find_by_token("expired") is None
        assert await uow.sessions.count_active(user.id) == 1
        assert (await uow.sessions.find_by_session_key("revoked")).is_revoked is True


@pytest.mark.asyncio
async def test_cleanup_deletes_dead_sessions(db_session, user):
    uow = SqlAlchemyUnitOfWork(db_session)
    async with uow:
        await uow.sessions.create(make_session(user, "live"))
        await uow.sessions.create(
            make_session(user, "expired", expires_at=utc_now() - timedelta(days=1))
        )
        await uow.sessions.create(
            make_session(
                user, "old-revoked", is_revoked=True, revoked_at=utc_now() - timedelta(days=40)
            )
        )
        await uow.sessions.create(
            make_session(
                user, "new-revoked", is_revoked=True, revoked_at=utc_now() - timedelta(days=1)
            )
        )
        await uow.commit()

    result = await CleanupExpiredSessionsUseCase(uow).execute(revoked_retention_days=30)

    assert result.value == {"expired_deleted": 1, "revoked_deleted": 1}
    async with uow:
        assert await uow.sessions.find_by_session_key("live") is not None
        assert await uow.sessions.find_by_session_key("new-revoked") is not None
        assert await uow.sessions.find_by_session_key("expired") is None

    # Idempotent
    again = await CleanupExpiredSessionsUseCase(uow).execute(revoked_retention_days=30)
    assert again.value == {"expired_deleted": 0, "revoked_deleted": 0}
