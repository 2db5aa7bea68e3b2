from datetime import datetime, timezone
from uuid import uuid4
from typing import List, Optional, Dict
from enum import Enum

from pydantic import BaseModel, Field, model_validator, validator

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class MatchStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

class Slot(str, Enum):
    A = "A"
    B = "B"

class FlagKind(str, Enum):
    BYE_VS_BYE = "BYE_VS_BYE"

class SlotRef(BaseModel):
    """Points at one slot of a match by its position in the bracket."""
    round_number: int = Field(ge=1)
    match_number: int = Field(ge=1)
    slot: Slot

    class Config:
        use_enum_values = True

class MatchModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    competition_id: str
    round_number: int = Field(ge=1)
    match_number: int = Field(ge=1)

    slot_a: Optional[str] = None # Group id, None until resolved
    slot_b: Optional[str] = None

    score_a: Optional[int] = None
    score_b: Optional[int] = None

    winner_id: Optional[str] = None

    status: MatchStatus = MatchStatus.SCHEDULED

    scheduled_time: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Fixed at generation time; None for the final and for round robin play
    feeds_into: Optional[SlotRef] = None

    class Config:
        from_attributes = True
        use_enum_values = True

    @validator('score_a', 'score_b')
    def score_not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError('Scores must be non-negative')
        return v

    @model_validator(mode="after")
    def check_match_invariants(self):
        if self.slot_a is not None and self.slot_a == self.slot_b:
            raise ValueError('A group cannot occupy both slots of a match')
        if self.winner_id is not None and self.winner_id not in (self.slot_a, self.slot_b):
            raise ValueError('Winner must be one of the groups in the match')
        if self.status == MatchStatus.COMPLETED:
            if self.score_a is None or self.score_b is None:
                raise ValueError('A completed match must have both scores set')
        elif self.winner_id is not None:
            raise ValueError('Only a completed match can have a winner')
        return self

    @property
    def is_resolved(self) -> bool:
        return self.slot_a is not None and self.slot_b is not None

    def group_in_slot(self, slot: str) -> Optional[str]:
        return self.slot_a if slot == Slot.A else self.slot_b

class BracketFlag(BaseModel):
    """A situation the engine will not resolve on its own; an administrator must decide."""
    kind: FlagKind
    round_number: int
    match_number: int
    group_ids: List[str] = Field(default_factory=list)
    message: str

    class Config:
        use_enum_values = True

class BracketModel(BaseModel):
    competition_id: str
    bracket_type: str

    matches: List[MatchModel] = Field(default_factory=list)

    rounds_structure: Dict[int, List[str]] = Field(default_factory=dict) # Match ids per round

    round_names: Dict[int, str] = Field(default_factory=dict) # "Final", "Semifinal", ... for elimination rounds

    flags: List[BracketFlag] = Field(default_factory=list)

    class Config:
        from_attributes = True
        use_enum_values = True

    def get_match(self, round_number: int, match_number: int) -> Optional[MatchModel]:
        for match in self.matches:
            if match.round_number == round_number and match.match_number == match_number:
                return match
        return None

    @property
    def total_rounds(self) -> int:
        return max(self.rounds_structure) if self.rounds_structure else 0
