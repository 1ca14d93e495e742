import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.revocation_store import MemoryRevocationStore
from src.app.services.token_service import TokenService
from tests.fixtures.telegram import TEST_BOT_TOKEN, TelegramPayloadFactory


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.find_by_id = AsyncMock()
    uow.users.find_by_external_id = AsyncMock(return_value=None)
    uow.users.create = AsyncMock(side_effect=lambda user: user)
    uow.users.update = AsyncMock(side_effect=lambda user: user)
    uow.users.is_banned = AsyncMock(return_value=False)

    uow.sessions = MagicMock()
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.find_by_token = AsyncMock(return_value=None)
    uow.sessions.find_by_session_key = AsyncMock(return_value=None)
    uow.sessions.find_by_user = AsyncMock(return_value=[])
    uow.sessions.touch = AsyncMock()
    uow.sessions.revoke = AsyncMock(return_value=True)
    uow.sessions.revoke_by_session_key = AsyncMock(return_value=True)
    uow.sessions.revoke_all_for_user = AsyncMock(return_value=0)
    uow.sessions.revoke_all_except = AsyncMock(return_value=0)
    uow.sessions.claim_for_rotation = AsyncMock(return_value=True)
    uow.sessions.count_active = AsyncMock(return_value=0)
    uow.sessions.delete_expired = AsyncMock(return_value=0)
    uow.sessions.delete_revoked_older_than = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def revocation_store():
    return MemoryRevocationStore()


@pytest.fixture
def token_service(revocation_store):
    return TokenService(
        "unit-access-secret",
        "unit-refresh-secret",
        revocation_store,
        issuer="test-issuer",
        audience="test-audience",
    )


@pytest.fixture
def telegram_payload():
    return TelegramPayloadFactory(TEST_BOT_TOKEN)
