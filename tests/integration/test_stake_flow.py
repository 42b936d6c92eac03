"""End-to-end staking and settlement against PostgreSQL."""

import asyncio

import pytest

from tests.integration.helpers import (
    create_market,
    expire_deadline,
    register_user,
    set_balance,
)

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _points(client, headers) -> dict:
    resp = await client.get("/api/v1/account/points", headers=headers)
    assert resp.status_code == 200
    return resp.json()["data"]


async def _stake(client, headers, market_id, stance, points):
    return await client.post(
        f"/api/v1/markets/{market_id}/votes",
        headers=headers,
        json={"stance": stance, "points_staked": points},
    )


class TestRegistration:
    async def test_new_user_gets_starting_points(self, client):
        _, headers = await register_user(client, "fresh")
        data = await _points(client, headers)
        assert data["balance"] == 1000
        assert data["lifetime_predictions_made"] == 0
        assert data["accuracy_percent"] == 0.0


class TestScenarios:
    async def test_full_lifecycle(self, client):
        owner_id, owner = await register_user(client, "owner")
        u1_id, u1 = await register_user(client, "alice")
        u2_id, u2 = await register_user(client, "bob")
        await set_balance(u1_id, 100)
        await set_balance(u2_id, 100)
        market_id = await create_market(client, owner)

        # A: stake 30 YES
        resp = await _stake(client, u1, market_id, True, 30)
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        assert data["balance"] == 70
        assert data["market"]["total_points"] == 30
        assert data["market"]["yes_count"] == 1

        # B: second user stakes 20 NO
        resp = await _stake(client, u2, market_id, False, 20)
        assert resp.status_code == 201
        market = resp.json()["data"]["market"]
        assert market["total_points"] == 50
        assert (market["yes_points"], market["no_points"]) == (30, 20)
        assert (market["yes_percentage"], market["no_percentage"]) == (50, 50)

        # E: before the deadline
        resp = await client.post(
            f"/api/v1/markets/{market_id}/resolve", headers=owner, json={"outcome": True}
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 4004

        await expire_deadline(market_id)

        # D: non-owner
        resp = await client.post(
            f"/api/v1/markets/{market_id}/resolve", headers=u1, json={"outcome": True}
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == 4003

        # C: owner resolves YES
        resp = await client.post(
            f"/api/v1/markets/{market_id}/resolve", headers=owner, json={"outcome": True}
        )
        assert resp.status_code == 200, resp.text
        summary = resp.json()["data"]
        assert summary["payouts"] == [
            {"user_id": u1_id, "points_staked": 30, "payout": 50, "correct": True}
        ]
        assert summary["undistributed_points"] == 0

        winner = await _points(client, u1)
        loser = await _points(client, u2)
        assert winner["balance"] == 120
        assert winner["accuracy_percent"] == 100.0
        assert loser["balance"] == 80
        assert loser["lifetime_predictions_made"] == 1
        assert loser["lifetime_correct"] == 0

        # resolved is terminal
        resp = await client.post(
            f"/api/v1/markets/{market_id}/resolve", headers=owner, json={"outcome": False}
        )
        assert resp.status_code == 409
        assert (await _points(client, u1))["balance"] == 120

        _, late = await register_user(client, "late")
        resp = await _stake(client, late, market_id, True, 10)
        assert resp.status_code == 409
        assert resp.json()["code"] == 3002

        detail = (await client.get(f"/api/v1/markets/{market_id}", headers=u1)).json()["data"]
        assert detail["resolved"] is True
        assert detail["outcome"] is True
        assert detail["my_vote"]["points_staked"] == 30

    async def test_no_winners_removes_pool(self, client):
        _, owner = await register_user(client, "owner")
        _, u1 = await register_user(client, "carol")
        market_id = await create_market(client, owner)
        await _stake(client, u1, market_id, False, 40)
        await expire_deadline(market_id)

        resp = await client.post(
            f"/api/v1/markets/{market_id}/resolve", headers=owner, json={"outcome": True}
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["undistributed_points"] == 40
        assert (await _points(client, u1))["balance"] == 960


class TestRejections:
    async def test_second_vote_rejected(self, client):
        _, owner = await register_user(client, "owner")
        _, u1 = await register_user(client, "dave")
        market_id = await create_market(client, owner)

        assert (await _stake(client, u1, market_id, True, 10)).status_code == 201
        resp = await _stake(client, u1, market_id, False, 10)

        assert resp.status_code == 409
        assert resp.json()["code"] == 4002
        assert (await _points(client, u1))["balance"] == 990

    async def test_insufficient_points_leaves_balance(self, client):
        _, owner = await register_user(client, "owner")
        u1_id, u1 = await register_user(client, "erin")
        await set_balance(u1_id, 25)
        market_id = await create_market(client, owner)

        resp = await _stake(client, u1, market_id, True, 26)

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        assert (await _points(client, u1))["balance"] == 25
        detail = (await client.get(f"/api/v1/markets/{market_id}")).json()["data"]
        assert detail["stake_count"] == 0

    async def test_unknown_market(self, client):
        _, u1 = await register_user(client, "frank")
        resp = await _stake(client, u1, "does-not-exist", True, 10)
        assert resp.status_code == 404


class TestConcurrency:
    async def test_same_user_concurrent_stakes_one_wins(self, client):
        _, owner = await register_user(client, "owner")
        _, u1 = await register_user(client, "grace")
        market_id = await create_market(client, owner)

        responses = await asyncio.gather(
            *[_stake(client, u1, market_id, i % 2 == 0, 10) for i in range(6)]
        )

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 409, 409, 409, 409, 409]
        assert (await _points(client, u1))["balance"] == 990
        detail = (await client.get(f"/api/v1/markets/{market_id}")).json()["data"]
        assert detail["stake_count"] == 1
        assert detail["total_points"] == 10

    async def test_many_users_aggregates_match_stakes(self, client):
        _, owner = await register_user(client, "owner")
        market_id = await create_market(client, owner)
        users = [await register_user(client, f"crowd{i}") for i in range(6)]

        responses = await asyncio.gather(
            *[_stake(client, h, market_id, i % 3 != 0, 5 + i) for i, (_, h) in enumerate(users)]
        )

        assert all(r.status_code == 201 for r in responses)
        detail = (await client.get(f"/api/v1/markets/{market_id}")).json()["data"]
        assert detail["stake_count"] == 6
        assert detail["total_points"] == sum(5 + i for i in range(6))
        assert detail["yes_points"] + detail["no_points"] == detail["total_points"]

    async def test_concurrent_resolves_pay_once(self, client):
        _, owner = await register_user(client, "owner")
        _, u1 = await register_user(client, "heidi")
        _, u2 = await register_user(client, "ivan")
        market_id = await create_market(client, owner)
        await _stake(client, u1, market_id, True, 30)
        await _stake(client, u2, market_id, False, 20)
        await expire_deadline(market_id)

        responses = await asyncio.gather(
            *[
                client.post(
                    f"/api/v1/markets/{market_id}/resolve",
                    headers=owner,
                    json={"outcome": True},
                )
                for _ in range(4)
            ]
        )

        assert sorted(r.status_code for r in responses) == [200, 409, 409, 409]
        assert all(r.json()["code"] == 3002 for r in responses if r.status_code == 409)
        winner = await _points(client, u1)
        assert winner["balance"] == 970 + 50
        assert winner["lifetime_predictions_made"] == 1
        assert (await _points(client, u2))["lifetime_predictions_made"] == 1

    async def test_stake_racing_resolve_is_paid_or_rejected(self, client):
        _, owner = await register_user(client, "owner")
        _, u1 = await register_user(client, "judy")
        racer_id, racer = await register_user(client, "kim")
        _, u3 = await register_user(client, "leo")
        market_id = await create_market(client, owner)
        await _stake(client, u1, market_id, True, 30)
        await _stake(client, u3, market_id, False, 10)
        await expire_deadline(market_id)

        resolve, stake = await asyncio.gather(
            client.post(
                f"/api/v1/markets/{market_id}/resolve", headers=owner, json={"outcome": True}
            ),
            _stake(client, racer, market_id, True, 20),
        )

        assert resolve.status_code == 200, resolve.text
        paid = {p["user_id"]: p["payout"] for p in resolve.json()["data"]["payouts"]}
        racer_points = await _points(client, racer)
        if stake.status_code == 201:
            # committed before the resolve took the market lock
            assert paid[racer_id] == 20 + 20 * 10 // 50
            assert racer_points["balance"] == 1000 - 20 + paid[racer_id]
            assert racer_points["lifetime_predictions_made"] == 1
        else:
            assert stake.status_code == 409
            assert stake.json()["code"] == 3002
            assert racer_id not in paid
            assert racer_points["balance"] == 1000
            assert racer_points["lifetime_predictions_made"] == 0
        detail = (await client.get(f"/api/v1/markets/{market_id}")).json()["data"]
        assert detail["stake_count"] == (3 if stake.status_code == 201 else 2)
