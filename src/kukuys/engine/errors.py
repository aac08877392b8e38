"""Errors raised by game operations."""

from __future__ import annotations


class GameError(Exception):
    """Base class; ``code`` is a stable identifier for API clients."""

    code = "game_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionFailed(GameError):
    code = "precondition_failed"


class InsufficientFunds(PreconditionFailed):
    code = "insufficient_funds"


class CollectionFull(PreconditionFailed):
    code = "collection_full"


class NotEnoughRoster(PreconditionFailed):
    code = "not_enough_roster"


class StillGrinding(PreconditionFailed):
    code = "still_grinding"


class PlayerBusy(PreconditionFailed):
    code = "player_busy"


class TooTired(PreconditionFailed):
    code = "too_tired"


class StatCapReached(PreconditionFailed):
    code = "stat_cap_reached"


class RosterFull(PreconditionFailed):
    code = "roster_full"


class DuplicateRosterEntry(PreconditionFailed):
    code = "duplicate_roster_entry"


class UnknownAction(PreconditionFailed):
    code = "unknown_action"


class PlayerNotFound(GameError):
    code = "player_not_found"

    def __init__(self, player_id: str):
        super().__init__("Player not found")
        self.player_id = player_id
