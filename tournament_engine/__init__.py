"""Bracket generation, match progression and leaderboards for convention competitions."""

__version__ = "0.1.0"
