from datetime import datetime
from typing import Optional, List
from uuid import uuid4
from enum import Enum

from pydantic import BaseModel, Field, validator

from tournament_engine.models.bracket_model import MatchModel, utcnow

class CompetitionCategory(str, Enum):
    SPORTS = "Sports"
    MIND_GAMES = "Mind Games"
    CREATIVE_ARTS = "Creative Arts"

class BracketDiscipline(str, Enum):
    SINGLE_ELIMINATION = "Single Elimination"
    DOUBLE_ELIMINATION = "Double Elimination" # Reserved, generation is not implemented
    ROUND_ROBIN = "Round Robin"

class CompetitionModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    category: CompetitionCategory
    bracket_type: BracketDiscipline
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True
        use_enum_values = True

    @validator('name')
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Competition name cannot be blank')
        return v.strip()

class CompetitionWithMatches(CompetitionModel):
    matches: List[MatchModel] = Field(default_factory=list)
    total_matches: int = 0
    completed_matches: int = 0
    champion_id: Optional[str] = None
