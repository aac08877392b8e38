"""Fill in image, team and role for recruited players."""

from __future__ import annotations

import logging
from typing import List

from kukuys.enrichment.liquipedia import PlayerLookup
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)


class PlayerEnricher:
    def __init__(self, store: GameStore, lookup: PlayerLookup):
        self.store = store
        self.lookup = lookup

    def enrich(self, player_id: str, name: str) -> bool:
        """Look ``name`` up and store whatever was found on ``player_id``.

        Never raises; a failed lookup leaves the player as it was.
        """

        try:
            updates = self.lookup.lookup(name).as_updates()
        except Exception as exc:
            logger.warning("Enrichment lookup failed for %s: %s", name, exc)
            return False
        if not updates:
            return False
        try:
            updated = self.store.update_player_fields(player_id, updates)
        except Exception as exc:
            logger.warning("Could not store enrichment for %s: %s", player_id, exc)
            return False
        if updated:
            logger.info("Enriched %s (%s) with %s", name, player_id, ", ".join(sorted(updates)))
        return updated

    def backfill(self) -> List[str]:
        """Enrich every player still missing a team or an image. Returns the ids updated."""

        pending = [p for p in self.store.list_players() if not p.team or not p.image_url]
        updated = [p.id for p in pending if self.enrich(p.id, p.name)]
        logger.info("Backfill updated %s of %s players", len(updated), len(pending))
        return updated
