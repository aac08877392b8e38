"""Kukuys Master: a Dota 2 team manager game."""

__version__ = "0.1.0"
