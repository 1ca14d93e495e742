import time
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.base import utc_now
from src.domain.entities import Session, User, UserStatus


@pytest.mark.asyncio
async def test_first_login_registers_user(client: AsyncClient, telegram_payload, db_session):
    payload = telegram_payload.build(telegram_id=42, username="ivan", last_name="Petrov")

    response = await client.post("/auth/telegram", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"user", "accessToken", "refreshToken", "expiresIn"}
    assert data["expiresIn"] == 900
    assert data["user"]["external_id"] == 42
    assert data["user"]["username"] == "ivan"
    assert data["user"]["status"] == "active"
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith(f"refreshToken={data['refreshToken']}")
    assert "httponly" in set_cookie.lower()

    users = (await db_session.exec(select(User))).all()
    assert len(users) == 1


@pytest.mark.asyncio
async def test_refresh_session_expires_in_seven_days(client: AsyncClient, login, db_session):
    data = await login(telegram_id=42)

    sessions = (await db_session.exec(select(Session))).all()
    assert len(sessions) == 1
    remaining = sessions[0].expires_at - utc_now()
    assert timedelta(days=7) - timedelta(minutes=1) < remaining <= timedelta(days=7)
    assert sessions[0].token_hash != data["refreshToken"]


@pytest.mark.asyncio
async def test_remember_me_session_expires_in_thirty_days(client: AsyncClient, login, db_session):
    await login(telegram_id=42, remember_me=True)

    session = (await db_session.exec(select(Session))).one()
    assert session.expires_at - utc_now() > timedelta(days=29)


@pytest.mark.asyncio
async def test_tampered_assertion_rejected(client: AsyncClient, telegram_payload):
    payload = telegram_payload.build(telegram_id=42)
    payload["id"] = 43

    response = await client.post("/auth/telegram", json=payload)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TELEGRAM_AUTH"


@pytest.mark.asyncio
async def test_stale_assertion_rejected(client: AsyncClient, telegram_payload):
    payload = telegram_payload.build(auth_date=int(time.time()) - 2 * 86400)

    response = await client.post("/auth/telegram", json=payload)

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_DATA_EXPIRED"


@pytest.mark.asyncio
async def test_malformed_assertion_rejected(client: AsyncClient):
    response = await client.post("/auth/telegram", json={"id": -1, "first_name": "Ivan"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"]


@pytest.mark.asyncio
async def test_banned_user_cannot_login(client: AsyncClient, telegram_payload, db_session):
    db_session.add(User(external_id=42, first_name="Ivan", status=UserStatus.banned))
    await db_session.commit()

    response = await client.post("/auth/telegram", json=telegram_payload.build(telegram_id=42))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "USER_BANNED"


@pytest.mark.asyncio
async def test_second_login_invalidates_first(client: AsyncClient, login):
    first = await login(telegram_id=42)
    second = await login(telegram_id=42)

    stale = await client.post("/auth/refresh", json={"refreshToken": first["refreshToken"]})
    fresh = await client.post("/auth/refresh", json={"refreshToken": second["refreshToken"]})

    assert stale.status_code == 401
    assert stale.json()["error"]["code"] == "TOKEN_REVOKED"
    assert fresh.status_code == 200


@pytest.mark.asyncio
async def test_get_session_returns_user(client: AsyncClient, login):
    data = await login(telegram_id=42, username="ivan")

    response = await client.get(
        "/auth/session", headers={"Authorization": f"Bearer {data['accessToken']}"}
    )

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "ivan"


@pytest.mark.asyncio
async def test_get_session_requires_token(client: AsyncClient):
    response = await client.get("/auth/session")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_get_session_rejects_refresh_token(client: AsyncClient, login):
    data = await login()

    response = await client.get(
        "/auth/session", headers={"Authorization": f"Bearer {data['refreshToken']}"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
