"""Probabilistic map and series resolution."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Tuple


logger = logging.getLogger(__name__)

BEST_OF_THREE = 2
BEST_OF_FIVE = 3


@dataclass(frozen=True)
class Team:
    name: str
    rating: int


@dataclass(frozen=True)
class SeriesResult:
    team1: Team
    team2: Team
    winner: Team
    loser: Team
    team1_odds: int
    team2_odds: int
    map_results: List[str] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def win_probability(team_a: Team, team_b: Team) -> float:
    """Chance that ``team_a`` takes a single map.

    Ratings are floored at 1 so every team keeps a non-zero chance.
    """

    rating_a = max(1, team_a.rating)
    rating_b = max(1, team_b.rating)
    return rating_a / (rating_a + rating_b)


def series_odds(team_a: Team, team_b: Team) -> Tuple[int, int]:
    team1_odds = round_half_up(100 * win_probability(team_a, team_b))
    return team1_odds, 100 - team1_odds


def simulate_map(team_a: Team, team_b: Team, rng: random.Random) -> str:
    return team_a.name if rng.random() < win_probability(team_a, team_b) else team_b.name


def simulate_series(team_a: Team, team_b: Team, wins_needed: int, rng: random.Random) -> SeriesResult:
    """Play maps until one side reaches ``wins_needed``.

    The reported odds are computed once before the first map and are
    informational only.
    """

    if wins_needed < 1:
        raise ValueError(f"wins_needed must be at least 1, got {wins_needed}")
    team1_odds, team2_odds = series_odds(team_a, team_b)
    map_results: List[str] = []
    wins_a = wins_b = 0
    while wins_a < wins_needed and wins_b < wins_needed:
        winner_name = simulate_map(team_a, team_b, rng)
        map_results.append(winner_name)
        if winner_name == team_a.name:
            wins_a += 1
        else:
            wins_b += 1
    winner, loser = (team_a, team_b) if wins_a >= wins_needed else (team_b, team_a)
    logger.debug("%s beat %s %s-%s", winner.name, loser.name, max(wins_a, wins_b), min(wins_a, wins_b))
    return SeriesResult(
        team1=team_a,
        team2=team_b,
        winner=winner,
        loser=loser,
        team1_odds=team1_odds,
        team2_odds=team2_odds,
        map_results=map_results,
    )
