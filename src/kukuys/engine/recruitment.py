"""Gacha recruitment and collection expansion."""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, Optional
from uuid import uuid4

from kukuys.config import ROLES, get_tier, iter_tiers, recruit_config
from kukuys.config.economy import (
    MAX_ENERGY,
    RECRUIT_COST,
    SLOT_EXPAND_AMOUNT,
    SLOT_EXPAND_COST,
)
from kukuys.engine.cooldowns import now_ms, resolve_cooldowns
from kukuys.engine.errors import CollectionFull, InsufficientFunds
from kukuys.models import GameState, Player
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)

STAT_ROLL_SPREAD = 24
TRASHTALK_MAX = 99

RecruitHook = Callable[[Player], None]

__all__ = [
    "expand_collection",
    "recruit",
    "recruit_config",
    "roll_player",
    "roll_stats",
    "roll_tier",
]


def roll_tier(rng: random.Random) -> str:
    """Inverse-CDF draw over the tier table in its fixed order."""

    draw = rng.random() * 100
    cumulative = 0
    tiers = list(iter_tiers())
    for rules in tiers:
        cumulative += rules.rate
        if draw < cumulative:
            return rules.tier
    return tiers[0].tier


def roll_stats(tier: str, rng: random.Random) -> Dict[str, int]:
    base = get_tier(tier).stat_base
    return {
        "drafting": rng.randint(0, STAT_ROLL_SPREAD) + base,
        "mechanics": rng.randint(0, STAT_ROLL_SPREAD) + base,
        "mental_strength": rng.randint(0, STAT_ROLL_SPREAD) + base,
        "leadership": rng.randint(0, STAT_ROLL_SPREAD) + base,
        "trashtalk": rng.randint(0, TRASHTALK_MAX),
    }


def roll_player(rng: random.Random) -> Player:
    tier = roll_tier(rng)
    name = rng.choice(get_tier(tier).names)
    stats = roll_stats(tier, rng)
    role = rng.choice(ROLES)
    return Player(
        id=f"{name}_{uuid4().hex[:12]}",
        name=name,
        tier=tier,
        role=role,
        energy=MAX_ENERGY,
        **stats,
    )


def recruit(
    store: GameStore,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
    on_recruited: Optional[RecruitHook] = None,
) -> Player:
    """Spend coins on one gacha roll and add the result to the collection.

    The balance check, capacity check, insert and deduction share one
    transaction. ``on_recruited`` runs after the commit; whatever it starts
    is not waited on and cannot fail the recruit.
    """

    rng = rng or random.Random()
    now = now_ms() if now is None else now
    resolve_cooldowns(store, now=now, rng=rng)
    with store.transaction() as conn:
        state = store.get_state(conn)
        if state.coins < RECRUIT_COST:
            raise InsufficientFunds("Not enough coins")
        if store.count_players(conn) >= state.collection_slots:
            raise CollectionFull(f"Collection full. Buy more slots in Shop ({SLOT_EXPAND_COST:,}).")
        player = store.insert_player(roll_player(rng), conn)
        store.adjust_coins(-RECRUIT_COST, conn)
    logger.info("Recruited %s player %s (%s) as %s", player.tier, player.name, player.id, player.role)

    if on_recruited is not None:
        try:
            on_recruited(player)
        except Exception as exc:
            logger.warning("Recruit hook failed for %s: %s", player.id, exc)
    return player


def expand_collection(store: GameStore) -> GameState:
    with store.transaction() as conn:
        state = store.get_state(conn)
        if state.coins < SLOT_EXPAND_COST:
            raise InsufficientFunds(f"Not enough coins. Need {SLOT_EXPAND_COST:,}.")
        state = store.update_state(
            conn,
            coins=state.coins - SLOT_EXPAND_COST,
            collection_slots=state.collection_slots + SLOT_EXPAND_AMOUNT,
        )
    logger.info("Collection expanded to %s slots", state.collection_slots)
    return state
