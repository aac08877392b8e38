"""Configuration helpers for tiers, roles and the game economy."""

from .tiers import (
    KNOWN_PLAYER_TEAMS,
    ROLES,
    TIER_ORDER,
    TierRules,
    get_caps,
    get_tier,
    iter_tiers,
    recruit_config,
)

__all__ = [
    "KNOWN_PLAYER_TEAMS",
    "ROLES",
    "TIER_ORDER",
    "TierRules",
    "get_caps",
    "get_tier",
    "iter_tiers",
    "recruit_config",
]
