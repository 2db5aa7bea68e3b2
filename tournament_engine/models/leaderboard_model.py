from typing import List, Optional

from pydantic import BaseModel, Field

from tournament_engine.models.competition_model import CompetitionCategory

class GroupStanding(BaseModel):
    group_id: str
    group_name: Optional[str] = None
    group_color: Optional[str] = None
    rank: int = 0
    wins: int = 0
    losses: int = 0
    total_points: int = 0
    matches_played: int = 0

class LeaderboardModel(BaseModel):
    category: Optional[CompetitionCategory] = None # None means every category
    standings: List[GroupStanding] = Field(default_factory=list)

    class Config:
        use_enum_values = True

    def group_order(self) -> List[str]:
        return [standing.group_id for standing in self.standings]
