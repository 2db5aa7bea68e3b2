from pydantic import BaseModel, Field
from typing import Optional, List

from tournament_engine.models.competition_model import BracketDiscipline, CompetitionCategory

class CompetitionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Name of the competition")
    category: CompetitionCategory
    bracket_type: BracketDiscipline

class BracketCreate(BaseModel):
    """Group ids in seeding order: position 1 is seed 1."""
    group_ids: List[str] = Field(default_factory=list)

class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None
