from pydantic import BaseModel
from typing import Optional

from tournament_engine.models.bracket_model import MatchModel
from tournament_engine.services.match_service import Propagation

class ScoreSubmission(BaseModel):
    # Left optional so a missing score reaches the engine and is reported with its field
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    status: Optional[str] = None # Defaults to Completed

class ScoreResult(BaseModel):
    success: bool = True
    match: MatchModel
    winner_id: Optional[str] = None
    is_tie: bool = False
    propagation: Optional[Propagation] = None
    message: str = "Score updated successfully"
