"""Helpers shared by the integration tests (HTTP setup plus direct SQL tweaks)."""

import uuid

from httpx import AsyncClient
from sqlalchemy import text

from src.pm_common.database import async_session_factory

_PASSWORD = "TestPass123"


async def register_user(client: AsyncClient, prefix: str) -> tuple[str, dict[str, str]]:
    """Register + login a fresh user; returns (user_id, auth headers)."""
    username = f"{prefix}_{uuid.uuid4().hex[:10]}"
    reg = await client.post("/api/v1/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": _PASSWORD,
    })
    assert reg.status_code == 201, reg.text
    login = await client.post("/api/v1/auth/login", json={
        "username": username,
        "password": _PASSWORD,
    })
    data = login.json()["data"]
    return data["user"]["user_id"], {"Authorization": f"Bearer {data['access_token']}"}


async def create_market(client: AsyncClient, headers: dict[str, str]) -> str:
    resp = await client.post("/api/v1/markets", headers=headers, json={
        "title": f"Integration market {uuid.uuid4().hex[:6]}",
        "category": "test",
        "resolution_deadline": "2099-01-01T00:00:00Z",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def execute_sql(sql: str, params: dict) -> None:
    async with async_session_factory() as session:
        await session.execute(text(sql), params)
        await session.commit()


async def set_balance(user_id: str, balance: int) -> None:
    await execute_sql(
        "UPDATE point_accounts SET balance = :balance WHERE user_id = :user_id",
        {"balance": balance, "user_id": user_id},
    )


async def expire_deadline(market_id: str) -> None:
    await execute_sql(
        "UPDATE prediction_markets"
        " SET resolution_deadline = NOW() - INTERVAL '1 minute' WHERE id = :id",
        {"id": market_id},
    )
