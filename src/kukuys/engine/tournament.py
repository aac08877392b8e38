"""Eight-team double-elimination tournament."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from kukuys.config.economy import (
    CHAMPION_COINS,
    FIELD_SIZE,
    KUKUYS_TEAM,
    OPPONENT_RATING_BASE,
    OPPONENT_RATING_SPREAD,
    REAL_TEAMS,
    REAL_TOURNAMENTS,
    ROSTER_SIZE,
    TEAM_RATING_MAX,
    TEAM_RATING_MIN,
)
from kukuys.engine.cooldowns import now_ms, resolve_cooldowns
from kukuys.engine.errors import NotEnoughRoster, StillGrinding
from kukuys.engine.match import (
    BEST_OF_FIVE,
    BEST_OF_THREE,
    SeriesResult,
    Team,
    round_half_up,
    simulate_series,
)
from kukuys.models import GameState, Player
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)

UB_QUARTER_FINALS = "Upper Bracket - Quarter Finals"
UB_SEMI_FINALS = "Upper Bracket - Semi Finals"
LB_ROUND_1 = "Lower Bracket - Round 1"
LB_QUARTER_FINALS = "Lower Bracket - Quarterfinals"
LB_SEMI_FINALS = "Lower Bracket - Semi Finals"
UB_FINAL = "Upper Bracket - Final"
LB_FINALS = "Lower Bracket - Finals"
GRAND_FINAL = "Grand Final"

# Reveal order consumed by clients.
ROUND_ORDER: Tuple[str, ...] = (
    UB_QUARTER_FINALS,
    UB_SEMI_FINALS,
    LB_ROUND_1,
    LB_QUARTER_FINALS,
    LB_SEMI_FINALS,
    UB_FINAL,
    LB_FINALS,
    GRAND_FINAL,
)


@dataclass(frozen=True)
class BracketMatch:
    team1: str
    team2: str
    winner: str
    team1_odds: int
    team2_odds: int
    map_results: List[str]

    @classmethod
    def from_series(cls, result: SeriesResult) -> "BracketMatch":
        return cls(
            team1=result.team1.name,
            team2=result.team2.name,
            winner=result.winner.name,
            team1_odds=result.team1_odds,
            team2_odds=result.team2_odds,
            map_results=list(result.map_results),
        )


@dataclass(frozen=True)
class BracketRound:
    label: str
    matches: List[BracketMatch] = field(default_factory=list)


@dataclass
class TournamentResult:
    tournament_name: str
    teams: List[Team]
    rounds: List[BracketRound]
    champion: str
    coins_awarded: int
    state: GameState


def team_rating(roster: Iterable[Player]) -> int:
    total = sum(player.mechanics + player.drafting for player in roster)
    return min(TEAM_RATING_MAX, max(TEAM_RATING_MIN, round_half_up(total / ROSTER_SIZE)))


def draw_field(kukuys_rating: int, rng: random.Random) -> List[Team]:
    """Seven random opponents plus the player's team, in random seed order."""

    opponents = [
        Team(name=name, rating=OPPONENT_RATING_BASE + rng.randint(0, OPPONENT_RATING_SPREAD))
        for name in rng.sample(REAL_TEAMS, FIELD_SIZE - 1)
    ]
    seeds = [Team(name=KUKUYS_TEAM, rating=kukuys_rating), *opponents]
    rng.shuffle(seeds)
    return seeds


def _play_round(
    label: str,
    pairings: Sequence[Tuple[Team, Team]],
    rng: random.Random,
    wins_needed: int = BEST_OF_THREE,
) -> Tuple[BracketRound, List[SeriesResult]]:
    results = [simulate_series(team1, team2, wins_needed, rng) for team1, team2 in pairings]
    return BracketRound(label=label, matches=[BracketMatch.from_series(r) for r in results]), results


def play_bracket(seeds: Sequence[Team], rng: random.Random) -> Tuple[List[BracketRound], Team]:
    """Run the fixed double-elimination bracket over eight seeded teams.

    Returns the rounds in reveal order and the champion.
    """

    if len(seeds) != FIELD_SIZE:
        raise ValueError(f"Bracket needs exactly {FIELD_SIZE} teams, got {len(seeds)}")
    rounds: List[BracketRound] = []

    ub_qf_round, ub_qf = _play_round(
        UB_QUARTER_FINALS, [(seeds[i * 2], seeds[i * 2 + 1]) for i in range(4)], rng
    )
    rounds.append(ub_qf_round)
    ub_qf_winners = [r.winner for r in ub_qf]
    ub_qf_losers = [r.loser for r in ub_qf]

    ub_sf_round, ub_sf = _play_round(
        UB_SEMI_FINALS, [(ub_qf_winners[i * 2], ub_qf_winners[i * 2 + 1]) for i in range(2)], rng
    )
    rounds.append(ub_sf_round)
    ub_sf_winners = [r.winner for r in ub_sf]
    ub_sf_losers = [r.loser for r in ub_sf]

    lb_r1_round, lb_r1 = _play_round(
        LB_ROUND_1, [(ub_qf_losers[i * 2], ub_qf_losers[i * 2 + 1]) for i in range(2)], rng
    )
    rounds.append(lb_r1_round)
    lb_r1_winners = [r.winner for r in lb_r1]

    # LB-R1 winner i meets UB-SF loser 1 - i.
    lb_qf_round, lb_qf = _play_round(
        LB_QUARTER_FINALS, [(lb_r1_winners[i], ub_sf_losers[1 - i]) for i in range(2)], rng
    )
    rounds.append(lb_qf_round)
    lb_qf_winners = [r.winner for r in lb_qf]

    lb_sf_round, (lb_sf,) = _play_round(LB_SEMI_FINALS, [(lb_qf_winners[0], lb_qf_winners[1])], rng)
    rounds.append(lb_sf_round)

    ub_final_round, (ub_final,) = _play_round(UB_FINAL, [(ub_sf_winners[0], ub_sf_winners[1])], rng)
    rounds.append(ub_final_round)

    lb_final_round, (lb_final,) = _play_round(LB_FINALS, [(ub_final.loser, lb_sf.winner)], rng)
    rounds.append(lb_final_round)

    grand_final_round, (grand_final,) = _play_round(
        GRAND_FINAL, [(ub_final.winner, lb_final.winner)], rng, wins_needed=BEST_OF_FIVE
    )
    rounds.append(grand_final_round)
    return rounds, grand_final.winner


def run_tournament(
    store: GameStore,
    *,
    rng: Optional[random.Random] = None,
    now: Optional[int] = None,
) -> TournamentResult:
    """Enter the roster into a tournament and pay out if it wins.

    Entry checks run before the field is drawn, so a rejected entry rolls
    nothing and leaves the balance untouched.
    """

    rng = rng or random.Random()
    now = now_ms() if now is None else now
    resolve_cooldowns(store, now=now, rng=rng)
    with store.transaction() as conn:
        roster = store.list_roster(conn)
        if len(roster) < ROSTER_SIZE:
            raise NotEnoughRoster(f"Need {ROSTER_SIZE} players in roster to enter the tournament.")
        if any(player.is_grinding(now) for player in roster):
            raise StillGrinding("Someone is still grinding. Wait until all grind sessions finish.")

        seeds = draw_field(team_rating(roster), rng)
        rounds, champion = play_bracket(seeds, rng)
        tournament_name = rng.choice(REAL_TOURNAMENTS)

        coins_awarded = 0
        if champion.name == KUKUYS_TEAM:
            coins_awarded = CHAMPION_COINS
            state = store.adjust_coins(CHAMPION_COINS, conn)
        else:
            state = store.get_state(conn)

    logger.info(
        "%s finished: champion %s, %s coins awarded",
        tournament_name,
        champion.name,
        coins_awarded,
    )
    return TournamentResult(
        tournament_name=tournament_name,
        teams=list(seeds),
        rounds=rounds,
        champion=champion.name,
        coins_awarded=coins_awarded,
        state=state,
    )
