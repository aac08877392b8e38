"""Pydantic models for API I/O."""

from .catalog import RecruitConfigResponse, TeamsResponse, TierRateResponse, TournamentsResponse
from .game import (
    ActionRequest,
    ActionResultResponse,
    BackfillResponse,
    ExpandResponse,
    RecruitResponse,
    RecycleRequest,
    StateResponse,
)
from .tournament import MatchResponse, RoundResponse, TeamResponse, TournamentResponse

__all__ = [
    "ActionRequest",
    "ActionResultResponse",
    "BackfillResponse",
    "ExpandResponse",
    "MatchResponse",
    "RecruitConfigResponse",
    "RecruitResponse",
    "RecycleRequest",
    "RoundResponse",
    "StateResponse",
    "TeamResponse",
    "TeamsResponse",
    "TierRateResponse",
    "TournamentResponse",
    "TournamentsResponse",
]
