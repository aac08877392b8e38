from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel


class TierRateResponse(BaseModel):
    tier: str
    rate: int


class RecruitConfigResponse(BaseModel):
    rates: List[TierRateResponse]
    pool: Dict[str, List[str]]


class TeamsResponse(BaseModel):
    teams: List[str]


class TournamentsResponse(BaseModel):
    tournaments: List[str]
