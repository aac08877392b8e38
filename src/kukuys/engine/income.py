"""Passive income from streaming players."""

from __future__ import annotations

import logging

from kukuys.config.economy import STREAM_ENERGY_DRAIN, STREAM_INCOME_PER_PLAYER
from kukuys.models import GameState
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)


def apply_passive_income(store: GameStore) -> GameState:
    """One income tick: coins for every streamer, energy drained from each."""

    with store.transaction() as conn:
        streamers = [player for player in store.list_players(conn) if player.is_streaming]
        for player in streamers:
            store.update_player_fields(
                player.id,
                {"energy": max(0, player.energy - STREAM_ENERGY_DRAIN)},
                conn=conn,
            )
        income = len(streamers) * STREAM_INCOME_PER_PLAYER
        if income:
            state = store.adjust_coins(income, conn)
        else:
            state = store.get_state(conn)
    if income:
        logger.info("Passive income: %s coins from %s streamers", income, len(streamers))
    return state
