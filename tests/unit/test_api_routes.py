"""Integration tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from goblinwar.api.app import create_app
from goblinwar.api.runtime import ApiState
from goblinwar.config import Settings


def _make_app():
    def factory() -> ApiState:
        return ApiState(settings=Settings(database_url="sqlite://"))

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


async def _create_player(client: AsyncClient, name: str = "Ada") -> int:
    response = await client.post("/players", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


@pytest.mark.asyncio
async def test_army_and_battle_flow_via_api():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

        player_id = await _create_player(client)

        response = await client.post(f"/players/{player_id}/battle", json={})
        assert response.status_code == 404
        assert response.json()["detail"] == "player army not found"

        response = await client.put(
            f"/players/{player_id}/army",
            json={"castle": 2, "cannon": 3, "knight": 4, "infantry": 6, "archer": 5},
        )
        assert response.status_code == 200

        response = await client.post(
            f"/players/{player_id}/army/add-point", json={"unitType": "knight"}
        )
        assert response.status_code == 200
        assert response.json()["knight"] == 5

        response = await client.post(
            f"/players/{player_id}/special-units",
            json={"name": "Ice Golem", "icon": "🧊", "power": 3, "quantity": 2},
        )
        assert response.status_code == 201

        response = await client.post(
            f"/players/{player_id}/battle",
            json={"difficulty": "easy", "attemptId": "attempt-1"},
        )
        assert response.status_code == 200
        battle = response.json()
        assert battle["totalPower"] == 21 + 6
        assert battle["difficultyTier"] == "Easy Override"
        assert battle["aiPower"] == sum(battle["aiArmy"].values())
        assert battle["battleDetails"][0] == "❄️ Winter Festival special units join the battle!"
        assert battle["battleResult"]["attemptId"] == "attempt-1"
        assert battle["battleResult"]["victory"] is battle["victory"]
        assert battle["newAchievements"] == []
        assert sum(battle["army"].values()) == 21 - battle["unitsLost"]

        response = await client.post(
            f"/players/{player_id}/battle",
            json={"difficulty": "easy", "attemptId": "attempt-1"},
        )
        assert response.status_code == 409
        assert response.json()["detail"]["battleResult"]["id"] == battle["battleResult"]["id"]

        response = await client.get(f"/players/{player_id}/army")
        assert response.json() == battle["army"]

        response = await client.get(f"/players/{player_id}/battles")
        assert response.status_code == 200
        history = response.json()
        assert len(history) == 1
        assert history[0]["totalPower"] == 27


@pytest.mark.asyncio
async def test_validation_and_listing_via_api():
    app, transport = _make_app()

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        first = await _create_player(client, "Ada")
        second = await _create_player(client, "Grace")

        response = await client.get("/players")
        assert [p["id"] for p in response.json()] == [first, second]

        response = await client.post("/players", json={"name": "   "})
        assert response.status_code == 400

        response = await client.get(f"/players/{first}/army")
        assert response.status_code == 200
        assert response.json() == {"castle": 0, "cannon": 0, "knight": 0, "infantry": 0, "archer": 0}

        response = await client.post(
            f"/players/{first}/army/add-point", json={"unitType": "dragon"}
        )
        assert response.status_code == 422

        response = await client.put(f"/players/{first}/army", json={"infantry": -1})
        assert response.status_code == 422

        response = await client.post(
            f"/players/{first}/special-units", json={"name": "Owl", "power": 1, "quantity": 0}
        )
        assert response.status_code == 422

        response = await client.get(f"/players/{second}/special-units")
        assert response.json() == []

        await client.put(f"/players/{first}/army", json={"infantry": 3})
        response = await client.post(f"/players/{first}/battle")
        assert response.status_code == 200
        assert response.json()["difficultyTier"] == "Novice"
