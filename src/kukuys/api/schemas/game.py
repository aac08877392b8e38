from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

from kukuys.models import GameState, Player


class StateResponse(BaseModel):
    state: GameState
    players: List[Player]


class ActionResultResponse(StateResponse):
    success: bool = True


class ActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(alias="playerId", min_length=1)
    action: str = Field(min_length=1)


class RecycleRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    player_id: str = Field(alias="playerId", min_length=1)


class RecruitResponse(BaseModel):
    player: Player


class ExpandResponse(BaseModel):
    success: bool = True
    state: GameState


class BackfillResponse(BaseModel):
    success: bool = True
    updated: List[str]
    players: List[Player]
