"""Canonical player and game state records shared across engine and API layers."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class Player(BaseModel):
    """A recruited player.

    ``grinding_until`` and ``sleeping_until`` are epoch milliseconds; ``None``
    means the timer is not running. ``team`` and ``image_url`` stay ``None``
    until enrichment fills them in.
    """

    id: str = Field(..., min_length=1)
    name: str
    tier: str
    role: Optional[str] = None
    drafting: int = Field(..., ge=0)
    mechanics: int = Field(..., ge=0)
    mental_strength: int = Field(..., ge=0)
    leadership: int = Field(..., ge=0)
    trashtalk: int = Field(..., ge=0)
    energy: int = Field(default=100, ge=0, le=100)
    is_roster: bool = False
    is_streaming: bool = False
    team: Optional[str] = None
    image_url: Optional[str] = None
    grinding_until: Optional[int] = None
    sleeping_until: Optional[int] = None

    model_config = ConfigDict(frozen=True)

    def is_grinding(self, now: int) -> bool:
        return self.grinding_until is not None and self.grinding_until > now

    def is_sleeping(self, now: int) -> bool:
        return self.sleeping_until is not None and self.sleeping_until > now

    def is_busy(self, now: int) -> bool:
        return self.is_grinding(now) or self.is_sleeping(now)


class GameState(BaseModel):
    """Singleton currency and capacity record."""

    coins: int = Field(default=1000, ge=0)
    internet_level: int = Field(default=1, ge=1)
    food_level: int = Field(default=1, ge=1)
    collection_slots: int = Field(default=8, ge=0)
    last_updated: Optional[str] = None

    model_config = ConfigDict(frozen=True)
