from fastapi import APIRouter, Depends

from tournament_engine.api.dependencies import get_competition_service, require_scorer
from tournament_engine.schemas import match_schemas
from tournament_engine.services.competition_service import CompetitionService

router = APIRouter()

@router.post("/matches/{match_id}/score", response_model=match_schemas.ScoreResult)
async def submit_score_endpoint(
    match_id: str,
    score_in: match_schemas.ScoreSubmission,
    service: CompetitionService = Depends(get_competition_service),
    _role: str = Depends(require_scorer),
):
    outcome = service.submit_score(match_id, score_in.score_a, score_in.score_b, score_in.status)
    return match_schemas.ScoreResult(
        match=outcome.match,
        winner_id=outcome.winner_id,
        is_tie=outcome.is_tie,
        propagation=outcome.propagation,
    )
