from __future__ import annotations

from typing import List

from pydantic import BaseModel

from kukuys.engine.tournament import TournamentResult
from kukuys.models import GameState


class TeamResponse(BaseModel):
    name: str
    rating: int


class MatchResponse(BaseModel):
    team1: str
    team2: str
    winner: str
    team1_odds: int
    team2_odds: int
    map_results: List[str]


class RoundResponse(BaseModel):
    round: str
    matches: List[MatchResponse]


class TournamentResponse(BaseModel):
    tournament_name: str
    teams: List[TeamResponse]
    rounds: List[RoundResponse]
    champion: str
    coins_awarded: int
    state: GameState

    @classmethod
    def from_result(cls, result: TournamentResult) -> "TournamentResponse":
        return cls(
            tournament_name=result.tournament_name,
            teams=[TeamResponse(name=team.name, rating=team.rating) for team in result.teams],
            rounds=[
                RoundResponse(
                    round=bracket_round.label,
                    matches=[
                        MatchResponse(
                            team1=match.team1,
                            team2=match.team2,
                            winner=match.winner,
                            team1_odds=match.team1_odds,
                            team2_odds=match.team2_odds,
                            map_results=list(match.map_results),
                        )
                        for match in bracket_round.matches
                    ],
                )
                for bracket_round in result.rounds
            ],
            champion=result.champion,
            coins_awarded=result.coins_awarded,
            state=result.state,
        )
