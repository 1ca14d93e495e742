from datetime import timedelta

import pytest

from src.app.use_cases.auth import LogoutUseCase
from src.domain.base import utc_now
from src.domain.entities import Session, User


@pytest.fixture
def user():
    return User(external_id=42, first_name="Ivan")


@pytest.mark.asyncio
async def test_logout_blacklists_access_and_revokes_session(mock_uow, token_service, user):
    pair = token_service.issue_token_pair(user, None)
    mock_uow.sessions.find_by_session_key.return_value = Session(
        user_id=user.id,
        token_hash="h",
        session_key=pair.session_key,
        expires_at=utc_now() + timedelta(days=7),
    )

    result = await LogoutUseCase(mock_uow, token_service).execute(
        user.id, pair.access_token, pair.refresh_token
    )

    assert result.value == {"session_revoked": True}
    assert await token_service.is_revoked(pair.access_token) is True
    mock_uow.sessions.revoke_by_session_key.assert_awaited_once_with(pair.session_key)


@pytest.mark.asyncio
async def test_logout_without_refresh_token(mock_uow, token_service, user):
    access = token_service.issue_access_token(user, None)

    result = await LogoutUseCase(mock_uow, token_service).execute(user.id, access)

    assert result.value == {"session_revoked": False}
    assert await token_service.is_revoked(access) is True
    mock_uow.sessions.revoke_by_session_key.assert_not_awaited()


@pytest.mark.asyncio
async def test_logout_ignores_garbage_refresh_token(mock_uow, token_service, user):
    access = token_service.issue_access_token(user, None)

    result = await LogoutUseCase(mock_uow, token_service).execute(user.id, access, "garbage")

    assert result.is_ok()
    mock_uow.sessions.find_by_session_key.assert_not_awaited()


@pytest.mark.asyncio
async def test_logout_does_not_revoke_foreign_session(mock_uow, token_service, user):
    stranger = User(external_id=7, first_name="Eve")
    pair = token_service.issue_token_pair(stranger, None)
    mock_uow.sessions.find_by_session_key.return_value = Session(
        user_id=stranger.id,
        token_hash="h",
        session_key=pair.session_key,
        expires_at=utc_now() + timedelta(days=7),
    )
    access = token_service.issue_access_token(user, None)

    result = await LogoutUseCase(mock_uow, token_service).execute(
        user.id, access, pair.refresh_token
    )

    assert result.value == {"session_revoked": False}
    mock_uow.sessions.revoke_by_session_key.assert_not_awaited()
