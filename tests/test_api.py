import random

import pytest
from httpx import ASGITransport, AsyncClient

from kukuys.api import create_app
from kukuys.config_loader import Settings
from kukuys.engine.tournament import ROUND_ORDER
from kukuys.enrichment import Enrichment, NullLookup, PlayerEnricher
from kukuys.models import Player
from kukuys.persistence import GameStore


class _TeamLookup:
    def lookup(self, name: str) -> Enrichment:
        return Enrichment(team=f"{name} Esports", role="Mid")


@pytest.fixture
def store(tmp_path) -> GameStore:
    return GameStore(tmp_path / "game.sqlite")


@pytest.fixture
async def client(store):
    settings = Settings(db_path=str(store.db_path), enrichment="off", income_interval=0)
    app = create_app(
        store=store,
        enricher=PlayerEnricher(store, NullLookup()),
        settings=settings,
        rng=random.Random(42),
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        async_client.app = app
        yield async_client


def _roster(store: GameStore, size: int = 5) -> None:
    for index in range(size):
        store.insert_player(
            Player(
                id=f"r{index}",
                name=f"Member{index}",
                tier="Epic",
                drafting=40,
                mechanics=40,
                mental_strength=40,
                leadership=40,
                trashtalk=40,
                is_roster=True,
            )
        )


@pytest.mark.anyio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.anyio
async def test_state_starts_empty(client: AsyncClient):
    response = await client.get("/api/state")
    assert response.status_code == 200
    payload = response.json()
    assert payload["state"]["coins"] == 1000
    assert payload["state"]["collection_slots"] == 8
    assert payload["players"] == []


@pytest.mark.anyio
async def test_recruit_and_state(client: AsyncClient):
    response = await client.post("/api/recruit")
    assert response.status_code == 200
    player = response.json()["player"]
    assert player["energy"] == 100
    assert player["team"] is None

    state = (await client.get("/api/state")).json()
    assert state["state"]["coins"] == 800
    assert [p["id"] for p in state["players"]] == [player["id"]]


@pytest.mark.anyio
async def test_recruit_schedules_enrichment(client: AsyncClient, store: GameStore):
    client.app.state.enricher.lookup = _TeamLookup()

    player = (await client.post("/api/recruit")).json()["player"]

    stored = store.get_player(player["id"])
    assert stored.team == f"{player['name']} Esports"
    assert stored.role == "Mid"


@pytest.mark.anyio
async def test_recruit_without_coins(client: AsyncClient, store: GameStore):
    store.update_state(coins=150)

    response = await client.post("/api/recruit")

    assert response.status_code == 400
    assert response.json()["detail"] == {"error": "Not enough coins", "code": "insufficient_funds"}
    assert store.count_players() == 0


@pytest.mark.anyio
async def test_recruit_config(client: AsyncClient):
    payload = (await client.get("/api/recruit-config")).json()
    assert sum(entry["rate"] for entry in payload["rates"]) == 100
    assert "Kuku" in payload["pool"]["Mythic"]


@pytest.mark.anyio
async def test_expand_collection(client: AsyncClient, store: GameStore):
    response = await client.post("/api/expand-collection")
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "insufficient_funds"

    store.update_state(coins=10_000)
    response = await client.post("/api/expand-collection")
    assert response.status_code == 200
    assert response.json()["state"]["collection_slots"] == 9


@pytest.mark.anyio
async def test_action_flow(client: AsyncClient, store: GameStore):
    _roster(store, 1)

    response = await client.post("/api/action", json={"playerId": "r0", "action": "train"})
    assert response.status_code == 200
    (player,) = response.json()["players"]
    assert player["energy"] == 80
    assert player["grinding_until"] is not None

    response = await client.post("/api/action", json={"playerId": "r0", "action": "sleep"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "player_busy"


@pytest.mark.anyio
async def test_action_errors(client: AsyncClient, store: GameStore):
    response = await client.post("/api/action", json={"playerId": "ghost", "action": "train"})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "Player not found"

    _roster(store, 1)
    response = await client.post("/api/action", json={"playerId": "r0", "action": "dance"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "unknown_action"

    response = await client.post("/api/action", json={"action": "train"})
    assert response.status_code == 422


@pytest.mark.anyio
async def test_recycle_player(client: AsyncClient, store: GameStore):
    _roster(store, 1)

    response = await client.post("/api/recycle-player", json={"playerId": "r0"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["state"]["coins"] == 1010
    assert response.json()["players"] == []


@pytest.mark.anyio
async def test_tournament_needs_full_roster(client: AsyncClient, store: GameStore):
    _roster(store, 4)

    response = await client.post("/api/tournament-run")

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "not_enough_roster"
    assert store.get_state().coins == 1000


@pytest.mark.anyio
async def test_tournament_run(client: AsyncClient, store: GameStore):
    _roster(store)

    response = await client.post("/api/tournament-run")

    assert response.status_code == 200
    payload = response.json()
    assert [r["round"] for r in payload["rounds"]] == list(ROUND_ORDER)
    assert sum(len(r["matches"]) for r in payload["rounds"]) == 14
    assert payload["champion"] in {team["name"] for team in payload["teams"]}
    assert payload["state"]["coins"] == 1000 + payload["coins_awarded"]


@pytest.mark.anyio
async def test_reset_collection(client: AsyncClient, store: GameStore):
    _roster(store, 2)
    store.update_state(coins=5)

    response = await client.post("/api/reset-collection")

    assert response.status_code == 200
    assert response.json()["players"] == []
    assert response.json()["state"]["coins"] == 1000


@pytest.mark.anyio
async def test_backfill(client: AsyncClient, store: GameStore):
    _roster(store, 2)
    client.app.state.enricher.lookup = _TeamLookup()

    response = await client.post("/api/backfill")

    assert response.status_code == 200
    assert sorted(response.json()["updated"]) == ["r0", "r1"]
    assert store.get_player("r1").team == "Member1 Esports"


@pytest.mark.anyio
async def test_catalogs(client: AsyncClient):
    teams = (await client.get("/api/teams")).json()["teams"]
    tournaments = (await client.get("/api/tournaments")).json()["tournaments"]
    assert len(teams) == 20
    assert "The International" in tournaments


@pytest.mark.anyio
async def test_backfill_reports_players_with_timers_resolved(client: AsyncClient, store: GameStore):
    _roster(store, 1)
    store.update_player_fields("r0", {"energy": 50, "sleeping_until": 1})

    response = await client.post("/api/backfill")

    assert response.status_code == 200
    (player,) = response.json()["players"]
    assert player["sleeping_until"] is None
    assert player["energy"] == 70
