"""External data for recruited players."""

from kukuys.config_loader import Settings

from .cache import TTLCache
from .enricher import PlayerEnricher
from .liquipedia import Enrichment, LiquipediaLookup, NullLookup, PlayerLookup, map_role


def build_lookup(settings: Settings) -> PlayerLookup:
    if settings.enrichment == "off":
        return NullLookup()
    return LiquipediaLookup(
        user_agent=settings.user_agent,
        rate_interval=settings.liquipedia_rate,
        parse_rate_interval=settings.liquipedia_parse_rate,
        cache_ttl=settings.cache_ttl,
    )


__all__ = [
    "Enrichment",
    "LiquipediaLookup",
    "NullLookup",
    "PlayerEnricher",
    "PlayerLookup",
    "TTLCache",
    "build_lookup",
    "map_role",
]
