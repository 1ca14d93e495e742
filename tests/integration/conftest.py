from contextlib import asynccontextmanager

import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from tests.fixtures.config import TestConfig
from tests.fixtures.telegram import TEST_BOT_TOKEN, TelegramPayloadFactory
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork


@pytest_asyncio.fixture
def telegram_payload():
    return TelegramPayloadFactory(TEST_BOT_TOKEN)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
def make_client(db_session):
    """Client factory for an app built from the given config class"""

    @asynccontextmanager
    async def _make_client(config=TestConfig):
        from httpx import ASGITransport
        from src.api.app import create_app

        app = create_app(config)

        async def override_get_unit_of_work():
            yield SqlAlchemyUnitOfWork(db_session)

        app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

    return _make_client


@pytest_asyncio.fixture
async def client(make_client):
    async with make_client(TestConfig) as ac:
        yield ac


@pytest_asyncio.fixture
async def login(client, telegram_payload):
    """Log in through the API and return the JSON body"""

    async def _login(telegram_id: int = 42, remember_me: bool = False, headers=None, **fields):
        payload = telegram_payload.build(telegram_id=telegram_id, **fields)
        response = await client.post(
            "/auth/telegram", json=dict(payload, remember_me=remember_me), headers=headers
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login
