from typing import List, Optional

from fastapi import APIRouter, Depends, status

from tournament_engine.api.dependencies import get_competition_service, require_admin
from tournament_engine.models.bracket_model import BracketModel
from tournament_engine.models.competition_model import CompetitionModel, CompetitionWithMatches
from tournament_engine.models.leaderboard_model import LeaderboardModel
from tournament_engine.schemas import competition_schemas
from tournament_engine.services.competition_service import CompetitionService

router = APIRouter()

# Declared before /competitions/{competition_id} so "leaderboard" is not taken for an id
@router.get("/competitions/leaderboard", response_model=LeaderboardModel)
async def get_leaderboard_endpoint(
    category: Optional[str] = None,
    service: CompetitionService = Depends(get_competition_service),
):
    return service.leaderboard(category=category)

@router.get("/competitions", response_model=List[CompetitionModel])
async def list_competitions_endpoint(
    category: Optional[str] = None,
    service: CompetitionService = Depends(get_competition_service),
):
    return service.list_competitions(category=category)

@router.get("/competitions/{competition_id}", response_model=CompetitionWithMatches)
async def get_competition_endpoint(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
):
    return service.get_competition_with_matches(competition_id)

@router.post("/admin/competitions", response_model=CompetitionModel, status_code=status.HTTP_201_CREATED)
async def create_competition_endpoint(
    competition_in: competition_schemas.CompetitionCreate,
    service: CompetitionService = Depends(get_competition_service),
    _role: str = Depends(require_admin),
):
    return service.create_competition(
        name=competition_in.name,
        category=competition_in.category,
        bracket_type=competition_in.bracket_type,
    )

@router.delete("/admin/competitions/{competition_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_competition_endpoint(
    competition_id: str,
    service: CompetitionService = Depends(get_competition_service),
    _role: str = Depends(require_admin),
):
    service.delete_competition(competition_id)

@router.post(
    "/admin/competitions/{competition_id}/bracket",
    response_model=BracketModel,
    status_code=status.HTTP_201_CREATED,
)
async def generate_bracket_endpoint(
    competition_id: str,
    bracket_in: competition_schemas.BracketCreate,
    service: CompetitionService = Depends(get_competition_service),
    _role: str = Depends(require_admin),
):
    """
    Seeds the competition's bracket, replacing any existing matches.

    - **group_ids**: groups in seeding order. Round 2 matches that pair two
      bye groups are returned in `flags` for an administrator to settle.
    """
    return service.generate_bracket(competition_id, bracket_in.group_ids)
