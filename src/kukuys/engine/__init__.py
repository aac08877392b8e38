"""Game rules: cooldowns, recruitment, actions and tournaments."""

from .actions import ACTIONS, game_snapshot, player_action, recycle_player, reset_collection
from .cooldowns import now_ms, resolve_cooldowns, resolve_expired_grinds, resolve_expired_sleeps
from .errors import (
    CollectionFull,
    DuplicateRosterEntry,
    GameError,
    InsufficientFunds,
    NotEnoughRoster,
    PlayerBusy,
    PlayerNotFound,
    PreconditionFailed,
    RosterFull,
    StatCapReached,
    StillGrinding,
    TooTired,
    UnknownAction,
)
from .income import apply_passive_income
from .match import SeriesResult, Team, simulate_map, simulate_series
from .recruitment import expand_collection, recruit, recruit_config
from .tournament import BracketMatch, BracketRound, TournamentResult, run_tournament

__all__ = [
    "ACTIONS",
    "BracketMatch",
    "BracketRound",
    "CollectionFull",
    "DuplicateRosterEntry",
    "GameError",
    "InsufficientFunds",
    "NotEnoughRoster",
    "PlayerBusy",
    "PlayerNotFound",
    "PreconditionFailed",
    "RosterFull",
    "SeriesResult",
    "StatCapReached",
    "StillGrinding",
    "Team",
    "TooTired",
    "TournamentResult",
    "UnknownAction",
    "apply_passive_income",
    "expand_collection",
    "game_snapshot",
    "now_ms",
    "player_action",
    "recruit",
    "recruit_config",
    "recycle_player",
    "reset_collection",
    "resolve_cooldowns",
    "resolve_expired_grinds",
    "resolve_expired_sleeps",
    "run_tournament",
    "simulate_map",
    "simulate_series",
]
