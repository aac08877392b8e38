from .player import GameState, Player

__all__ = ["GameState", "Player"]
