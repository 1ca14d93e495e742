import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import Session


def auth_headers(data):
    return {
        "Authorization": f"Bearer {data['accessToken']}",
        "X-Refresh-Token": data["refreshToken"],
    }


@pytest.mark.asyncio
async def test_logout_blacklists_access_token(client: AsyncClient, login):
    data = await login()

    response = await client.post("/auth/logout", headers=auth_headers(data))

    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    after = await client.get(
        "/auth/session", headers={"Authorization": f"Bearer {data['accessToken']}"}
    )
    assert after.status_code == 401
    assert after.json()["error"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_logout_revokes_refresh_session(client: AsyncClient, login, db_session):
    data = await login()

    await client.post("/auth/logout", headers=auth_headers(data))

    session = (await db_session.exec(select(Session))).one()
    assert session.is_revoked is True
    assert session.revoked_at is not None

    refresh = await client.post("/auth/refresh", json={"refreshToken": data["refreshToken"]})
    assert refresh.status_code == 401
    assert refresh.json()["error"]["code"] == "TOKEN_REVOKED"


@pytest.mark.asyncio
async def test_logout_clears_cookie(client: AsyncClient, login):
    data = await login()

    response = await client.post("/auth/logout", headers=auth_headers(data))

    assert 'refreshToken=""' in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_logout_requires_token(client: AsyncClient):
    response = await client.post("/auth/logout")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_all_revokes_everything(client: AsyncClient, login, db_session):
    data = await login()

    response = await client.post(
        "/auth/logout-all", headers={"Authorization": f"Bearer {data['accessToken']}"}
    )

    assert response.status_code == 200
    sessions = (await db_session.exec(select(Session))).all()
    assert all(session.is_revoked for session in sessions)

    after = await client.get(
        "/auth/session", headers={"Authorization": f"Bearer {data['accessToken']}"}
    )
    assert after.status_code == 401
    assert after.json()["error"]["code"] == "TOKEN_REVOKED"
