"""Per-player actions: train, sleep, stream, roster membership and recycle."""

from __future__ import annotations

import logging
import random
import sqlite3
from typing import Callable, Dict, List, Optional, Tuple

from kukuys.config import get_caps
from kukuys.config.economy import (
    GRIND_DURATION_MS,
    RECYCLE_COINS,
    ROSTER_SIZE,
    SLEEP_DURATION_MS,
    TRAIN_ENERGY_COST,
)
from kukuys.engine.cooldowns import now_ms, resolve_cooldowns
from kukuys.engine.errors import (
    DuplicateRosterEntry,
    PlayerBusy,
    PlayerNotFound,
    RosterFull,
    StatCapReached,
    StillGrinding,
    TooTired,
    UnknownAction,
)
from kukuys.models import GameState, Player
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)

ACTIONS = ("train", "sleep", "toggle_stream", "toggle_roster", "recycle")

Snapshot = Tuple[GameState, List[Player]]


def _train(store: GameStore, player: Player, now: int, conn: sqlite3.Connection) -> None:
    if player.energy < TRAIN_ENERGY_COST:
        raise TooTired("Too tired")
    if player.is_grinding(now):
        raise StillGrinding("Grinding in progress. Cannot interrupt, wait until it finishes.")
    if player.is_sleeping(now):
        raise PlayerBusy("Player is sleeping. Cannot interrupt, wait until they wake.")
    mechanics_cap, mental_cap = get_caps(player.tier)
    if player.mechanics >= mechanics_cap and player.mental_strength >= mental_cap:
        raise StatCapReached("Already at max for this tier. No room to improve.")
    store.update_player_fields(
        player.id,
        {
            "energy": max(0, player.energy - TRAIN_ENERGY_COST),
            "grinding_until": now + GRIND_DURATION_MS,
        },
        conn=conn,
    )


def _sleep(store: GameStore, player: Player, now: int, conn: sqlite3.Connection) -> None:
    if player.is_grinding(now):
        raise PlayerBusy("Grinding in progress. Wait until it finishes before sleeping.")
    if player.is_sleeping(now):
        raise PlayerBusy("Already sleeping. Cannot interrupt, wait until they wake.")
    store.update_player_fields(player.id, {"sleeping_until": now + SLEEP_DURATION_MS}, conn=conn)


def _toggle_stream(store: GameStore, player: Player, now: int, conn: sqlite3.Connection) -> None:
    store.update_player_fields(player.id, {"is_streaming": not player.is_streaming}, conn=conn)


def _toggle_roster(store: GameStore, player: Player, now: int, conn: sqlite3.Connection) -> None:
    if not player.is_roster:
        roster = store.list_roster(conn)
        if len(roster) >= ROSTER_SIZE:
            raise RosterFull(f"Roster full (max {ROSTER_SIZE})")
        if any(member.name == player.name and member.id != player.id for member in roster):
            raise DuplicateRosterEntry("That player is already in your roster (one copy per player).")
    store.update_player_fields(player.id, {"is_roster": not player.is_roster}, conn=conn)


def _recycle(store: GameStore, player: Player, now: int, conn: sqlite3.Connection) -> None:
    store.delete_player(player.id, conn)
    store.adjust_coins(RECYCLE_COINS, conn)


_HANDLERS: Dict[str, Callable[[GameStore, Player, int, sqlite3.Connection], None]] = {
    "train": _train,
    "sleep": _sleep,
    "toggle_stream": _toggle_stream,
    "toggle_roster": _toggle_roster,
    "recycle": _recycle,
}


def player_action(
    store: GameStore,
    player_id: str,
    action: str,
    *,
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Snapshot:
    """Apply one action to one player and return the refreshed state."""

    now = now_ms() if now is None else now
    resolve_cooldowns(store, now=now, rng=rng)
    with store.transaction() as conn:
        player = store.get_player(player_id, conn)
        if player is None:
            raise PlayerNotFound(player_id)
        handler = _HANDLERS.get(action)
        if handler is None:
            raise UnknownAction(f"Unknown action {action!r}; expected one of {', '.join(ACTIONS)}")
        handler(store, player, now, conn)
    logger.info("Applied %s to %s (%s)", action, player.name, player.id)
    return game_snapshot(store, now=now, rng=rng)


def recycle_player(store: GameStore, player_id: str) -> Snapshot:
    return player_action(store, player_id, "recycle")


def game_snapshot(
    store: GameStore,
    *,
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> Snapshot:
    """State and players as a client should see them, with timers resolved."""

    with store.transaction() as conn:
        resolve_cooldowns(store, now=now, rng=rng, conn=conn)
        return store.get_state(conn), store.list_players(conn)


def reset_collection(store: GameStore) -> Snapshot:
    with store.transaction() as conn:
        state = store.reset(conn)
        players = store.list_players(conn)
    logger.info("Collection reset")
    return state, players
