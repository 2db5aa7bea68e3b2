"""
Storage module for competitions, groups and matches.

Usage:
    from tournament_engine.storage import JsonCompetitionRepository

    repository = JsonCompetitionRepository(data_dir="data")
    matches = repository.list_matches(competition_id)
"""

from .base import CompetitionRepository
from .json_store import JsonCompetitionRepository

__all__ = [
    'CompetitionRepository',
    'JsonCompetitionRepository',
]
