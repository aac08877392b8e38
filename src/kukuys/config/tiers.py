"""Tier configuration for recruitment rolls and grind caps."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple


@dataclass(frozen=True)
class TierRules:
    tier: str
    rate: int
    stat_base: int
    mechanics_cap: int
    mental_cap: int
    names: Tuple[str, ...]


# Iteration order is the roll order: a draw picks the first tier whose
# cumulative rate exceeds it.
_TIER_RULES: Dict[str, TierRules] = {
    "Common": TierRules(
        tier="Common",
        rate=45,
        stat_base=5,
        mechanics_cap=40,
        mental_cap=40,
        names=("Hubris", "Lashsegway", "Sunshine", "Chupaeng", "Alo", "Badong", "SirCherry"),
    ),
    "Rare": TierRules(
        tier="Rare",
        rate=28,
        stat_base=15,
        mechanics_cap=55,
        mental_cap=55,
        names=("Nevertheless", "Joevy", "JTZ", "Sep", "Mepweet", "Jabolero"),
    ),
    "Epic": TierRules(
        tier="Epic",
        rate=14,
        stat_base=28,
        mechanics_cap=70,
        mental_cap=70,
        names=("Kokz", "Yowe", "JG", "Jwl", "Jing", "Abat"),
    ),
    "Legendary": TierRules(
        tier="Legendary",
        rate=10,
        stat_base=38,
        mechanics_cap=85,
        mental_cap=85,
        names=("Gabbi", "Armel", "Palos", "Karl", "Tino", "Natsumi", "Skem", "Nikko"),
    ),
    "Mythic": TierRules(
        tier="Mythic",
        rate=3,
        stat_base=45,
        mechanics_cap=99,
        mental_cap=99,
        names=("Kuku", "DJ", "Tims"),
    ),
}

TIER_ORDER: Tuple[str, ...] = tuple(_TIER_RULES)

ROLES: Tuple[str, ...] = ("Carry", "Mid", "Offlane", "Soft Support", "Hard Support")

# Liquipedia is unreliable for some of the pool; these keep teams right.
KNOWN_PLAYER_TEAMS: Mapping[str, str] = {
    "Tims": "OG",
    "Palos": "Execration",
    "DJ": "PlayTime",
    "Kuku": "Kukuys",
    "Gabbi": "Execration",
    "Armel": "Blacklist International",
    "Karl": "T1",
    "Tino": "Team Secret",
    "Natsumi": "Talon Esports",
    "Skem": "Bleed Esports",
    "Nikko": "BOOM Esports",
    "Kokz": "Omega Gaming",
    "Yowe": "Motivate.Trust",
    "JG": "Omega Gaming",
    "Jwl": "Team Zero",
    "Jing": "Neon Esports",
    "Abat": "Talon Esports",
    **{
        name: "Kukuys"
        for name in _TIER_RULES["Rare"].names + _TIER_RULES["Common"].names
    },
}


def iter_tiers() -> Iterable[TierRules]:
    """Return tier rules in roll order."""

    return _TIER_RULES.values()


def get_tier(tier: str) -> TierRules:
    """Fetch rules for a tier name (case-insensitive), raising KeyError if missing."""

    for key, rules in _TIER_RULES.items():
        if key.lower() == tier.strip().lower():
            return rules
    raise KeyError(f"No tier rules configured for tier={tier!r}")


def get_caps(tier: str) -> Tuple[int, int]:
    """Return (mechanics_cap, mental_cap), treating unknown tiers as Common."""

    try:
        rules = get_tier(tier)
    except KeyError:
        rules = _TIER_RULES["Common"]
    return rules.mechanics_cap, rules.mental_cap


def recruit_config() -> dict:
    """Rates and name pools in the shape served to clients."""

    return {
        "rates": [{"tier": rules.tier, "rate": rules.rate} for rules in iter_tiers()],
        "pool": {rules.tier: list(rules.names) for rules in iter_tiers()},
    }
