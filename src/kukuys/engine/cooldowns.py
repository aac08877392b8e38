"""Lazy resolution of grind and sleep timers.

Nothing fires when a timer runs out. Instead every read of player state a
client can observe first sweeps the collection for elapsed timers and applies
their effect. Each update is guarded on the timer value that was read, so an
expiry is applied once even if two sweeps overlap.
"""

from __future__ import annotations

import logging
import random
import sqlite3
import time
from typing import Optional

from kukuys.config import get_caps
from kukuys.config.economy import (
    GRIND_MECHANICS_STEP,
    GRIND_MENTAL_STEP,
    MAX_ENERGY,
    SLEEP_ENERGY_GAIN,
)
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def resolve_expired_grinds(
    store: GameStore,
    *,
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> int:
    """Apply the outcome of every finished grind. Returns how many were applied."""

    now = now_ms() if now is None else now
    rng = rng or random.Random()
    applied = 0
    with store.connection(conn) as c:
        for player in store.list_players(c):
            if player.grinding_until is None or player.grinding_until > now:
                continue
            mechanics_cap, mental_cap = get_caps(player.tier)
            if rng.random() < 0.5:
                mechanics = min(player.mechanics + GRIND_MECHANICS_STEP, mechanics_cap)
                mental = min(player.mental_strength + GRIND_MENTAL_STEP, mental_cap)
            else:
                mechanics = max(0, player.mechanics - GRIND_MECHANICS_STEP)
                mental = max(0, player.mental_strength - GRIND_MENTAL_STEP)
            updated = store.update_player_fields(
                player.id,
                {"mechanics": mechanics, "mental_strength": mental, "grinding_until": None},
                only_if={"grinding_until": player.grinding_until},
                conn=c,
            )
            if updated:
                applied += 1
                logger.info(
                    "Grind finished for %s (%s): mechanics %s -> %s, mental %s -> %s",
                    player.name,
                    player.id,
                    player.mechanics,
                    mechanics,
                    player.mental_strength,
                    mental,
                )
    return applied


def resolve_expired_sleeps(
    store: GameStore,
    *,
    now: Optional[int] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> int:
    """Restore energy for every finished sleep. Returns how many were applied."""

    now = now_ms() if now is None else now
    applied = 0
    with store.connection(conn) as c:
        for player in store.list_players(c):
            if player.sleeping_until is None or player.sleeping_until > now:
                continue
            energy = min(MAX_ENERGY, player.energy + SLEEP_ENERGY_GAIN)
            updated = store.update_player_fields(
                player.id,
                {"energy": energy, "sleeping_until": None},
                only_if={"sleeping_until": player.sleeping_until},
                conn=c,
            )
            if updated:
                applied += 1
                logger.info("%s (%s) woke up with %s energy", player.name, player.id, energy)
    return applied


def resolve_cooldowns(
    store: GameStore,
    *,
    now: Optional[int] = None,
    rng: Optional[random.Random] = None,
    conn: Optional[sqlite3.Connection] = None,
) -> None:
    now = now_ms() if now is None else now
    with store.connection(conn) as c:
        resolve_expired_grinds(store, now=now, rng=rng, conn=c)
        resolve_expired_sleeps(store, now=now, conn=c)
