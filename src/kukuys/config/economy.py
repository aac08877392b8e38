"""Economy, cooldown and tournament constants."""

from __future__ import annotations

from typing import Tuple

STARTING_COINS = 1_000
STARTING_SLOTS = 8

RECRUIT_COST = 200
SLOT_EXPAND_COST = 10_000
SLOT_EXPAND_AMOUNT = 1
RECYCLE_COINS = 10

GRIND_DURATION_MS = 5 * 60 * 1000
SLEEP_DURATION_MS = 5 * 60 * 1000
SLEEP_ENERGY_GAIN = 20
TRAIN_ENERGY_COST = 20
MAX_ENERGY = 100

GRIND_MECHANICS_STEP = 2
GRIND_MENTAL_STEP = 1

ROSTER_SIZE = 5

STREAM_INCOME_PER_PLAYER = 10
STREAM_ENERGY_DRAIN = 2

KUKUYS_TEAM = "Kukuys"
CHAMPION_COINS = 1_000
TEAM_RATING_MIN = 20
TEAM_RATING_MAX = 100
OPPONENT_RATING_BASE = 35
OPPONENT_RATING_SPREAD = 54
FIELD_SIZE = 8

REAL_TEAMS: Tuple[str, ...] = (
    "Team Spirit", "Gaimin Gladiators", "Team Falcons", "Tundra Esports",
    "T1", "Talon Esports", "Team Secret", "OG", "Virtus.pro", "Natus Vincere",
    "Entity", "LGD Gaming", "Xtreme Gaming", "Azure Ray", "Team Liquid",
    "Evil Geniuses", "beastcoast", "Thunder Awaken", "PSG.Quest", "9Pandas",
)

REAL_TOURNAMENTS: Tuple[str, ...] = (
    "The International", "Riyadh Masters", "ESL One", "DreamLeague",
    "Bali Major", "Berlin Major", "BetBoom Dacha", "BB Dacha",
    "Predator League", "PGL Wallachia", "IEM Katowice",
)
