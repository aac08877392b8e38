import random

import pytest

from kukuys.engine import (
    DuplicateRosterEntry,
    PlayerBusy,
    PlayerNotFound,
    RosterFull,
    StatCapReached,
    StillGrinding,
    TooTired,
    UnknownAction,
    game_snapshot,
    player_action,
    recycle_player,
    reset_collection,
)
from kukuys.config.economy import GRIND_DURATION_MS, SLEEP_DURATION_MS
from kukuys.models import Player
from kukuys.persistence import GameStore


NOW = 1_700_000_000_000


@pytest.fixture
def store(tmp_path) -> GameStore:
    return GameStore(tmp_path / "game.sqlite")


def _insert(store: GameStore, player_id: str = "Joevy_1", **overrides) -> Player:
    data = dict(
        id=player_id,
        name="Joevy",
        tier="Rare",
        role="Carry",
        drafting=30,
        mechanics=30,
        mental_strength=30,
        leadership=30,
        trashtalk=30,
    )
    data.update(overrides)
    return store.insert_player(Player(**data))


def _act(store: GameStore, player_id: str, action: str, now: int = NOW):
    return player_action(store, player_id, action, now=now, rng=random.Random(11))


def test_train_when_tired_changes_nothing(store):
    _insert(store, energy=15)

    with pytest.raises(TooTired):
        _act(store, "Joevy_1", "train")

    player = store.get_player("Joevy_1")
    assert player.energy == 15
    assert player.grinding_until is None


def test_train_starts_grind(store):
    _insert(store)

    state, players = _act(store, "Joevy_1", "train")

    (player,) = players
    assert player.energy == 80
    assert player.grinding_until == NOW + GRIND_DURATION_MS
    assert state.coins == 1000


def test_grind_cannot_be_interrupted(store):
    _insert(store, grinding_until=NOW + 1)

    with pytest.raises(StillGrinding):
        _act(store, "Joevy_1", "train")
    with pytest.raises(PlayerBusy):
        _act(store, "Joevy_1", "sleep")

    assert store.get_player("Joevy_1").grinding_until == NOW + 1


def test_train_while_sleeping_is_rejected(store):
    _insert(store, sleeping_until=NOW + 1)

    with pytest.raises(PlayerBusy):
        _act(store, "Joevy_1", "train")
    with pytest.raises(PlayerBusy):
        _act(store, "Joevy_1", "sleep")


def test_train_at_tier_cap_is_rejected(store):
    _insert(store, mechanics=55, mental_strength=55)

    with pytest.raises(StatCapReached):
        _act(store, "Joevy_1", "train")

    assert store.get_player("Joevy_1").energy == 100


def test_expired_grind_is_resolved_before_training_again(store):
    _insert(store, grinding_until=NOW - 1)

    _, (player,) = _act(store, "Joevy_1", "train")

    assert player.grinding_until == NOW + GRIND_DURATION_MS
    assert (player.mechanics, player.mental_strength) in {(32, 31), (28, 29)}


def test_sleep_sets_timer(store):
    _insert(store, energy=50)

    _, (player,) = _act(store, "Joevy_1", "sleep")

    assert player.sleeping_until == NOW + SLEEP_DURATION_MS
    assert player.energy == 50

    _, (player,) = _act(store, "Joevy_1", "toggle_stream", now=NOW + SLEEP_DURATION_MS)
    assert player.energy == 70
    assert player.sleeping_until is None


def test_toggle_stream_flips(store):
    _insert(store)

    _, (player,) = _act(store, "Joevy_1", "toggle_stream")
    assert player.is_streaming
    _, (player,) = _act(store, "Joevy_1", "toggle_stream")
    assert not player.is_streaming


def test_roster_holds_five(store):
    for index in range(5):
        _insert(store, f"p{index}", name=f"Name{index}", is_roster=True)
    _insert(store, "extra", name="Extra")

    with pytest.raises(RosterFull):
        _act(store, "extra", "toggle_roster")

    _, players = _act(store, "p0", "toggle_roster")
    assert sum(player.is_roster for player in players) == 4
    _, players = _act(store, "extra", "toggle_roster")
    assert sum(player.is_roster for player in players) == 5


def test_roster_rejects_second_copy_of_a_player(store):
    _insert(store, "first", is_roster=True)
    _insert(store, "second")

    with pytest.raises(DuplicateRosterEntry):
        _act(store, "second", "toggle_roster")

    assert not store.get_player("second").is_roster


def test_recycle_refunds_coins(store):
    _insert(store)

    state, players = _act(store, "Joevy_1", "recycle")

    assert players == []
    assert state.coins == 1010


def test_recycle_player_shortcut(store):
    _insert(store)

    state, players = recycle_player(store, "Joevy_1")

    assert players == []
    assert state.coins == 1010


def test_unknown_player(store):
    with pytest.raises(PlayerNotFound) as excinfo:
        _act(store, "missing", "train")
    assert excinfo.value.player_id == "missing"

    with pytest.raises(PlayerNotFound):
        _act(store, "missing", "dance")


def test_unknown_action(store):
    _insert(store)

    with pytest.raises(UnknownAction):
        _act(store, "Joevy_1", "dance")


def test_busy_timers_never_overlap(store):
    _insert(store)
    _act(store, "Joevy_1", "sleep")
    with pytest.raises(PlayerBusy):
        _act(store, "Joevy_1", "train", now=NOW + 1)

    player = store.get_player("Joevy_1")
    assert not (player.is_grinding(NOW + 1) and player.is_sleeping(NOW + 1))


def test_snapshot_resolves_finished_sleep(store):
    _insert(store, energy=10, sleeping_until=NOW - 5)

    _, (player,) = game_snapshot(store, now=NOW, rng=random.Random(0))

    assert player.energy == 30
    assert player.sleeping_until is None


def test_reset_collection(store):
    _insert(store)
    store.update_state(coins=50, collection_slots=12)

    state, players = reset_collection(store)

    assert players == []
    assert (state.coins, state.collection_slots) == (1000, 8)
