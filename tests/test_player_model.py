import pytest
from pydantic import ValidationError

from kukuys.models import GameState, Player


def _player(**overrides) -> Player:
    data = dict(
        id="Kuku_1",
        name="Kuku",
        tier="Mythic",
        role="Mid",
        drafting=50,
        mechanics=60,
        mental_strength=55,
        leadership=47,
        trashtalk=99,
    )
    data.update(overrides)
    return Player(**data)


def test_player_is_frozen():
    player = _player()

    assert player.energy == 100
    assert player.is_roster is False
    assert player.team is None

    with pytest.raises((TypeError, ValidationError)):
        player.energy = 10  # type: ignore[misc]


def test_energy_is_bounded():
    with pytest.raises(ValidationError):
        _player(energy=101)
    with pytest.raises(ValidationError):
        _player(energy=-1)


def test_busy_predicates_compare_against_now():
    grinding = _player(grinding_until=2_000)
    assert grinding.is_grinding(1_999)
    assert not grinding.is_grinding(2_000)
    assert grinding.is_busy(1_000)

    sleeping = _player(sleeping_until=5_000)
    assert sleeping.is_sleeping(4_000)
    assert not sleeping.is_grinding(4_000)
    assert not sleeping.is_busy(5_000)


def test_game_state_defaults():
    state = GameState()
    assert state.coins == 1000
    assert state.collection_slots == 8
    with pytest.raises(ValidationError):
        GameState(coins=-1)
