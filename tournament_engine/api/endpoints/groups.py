from typing import List

from fastapi import APIRouter, Depends, status

from tournament_engine.api.dependencies import get_competition_service, require_admin
from tournament_engine.models.group_model import GroupModel
from tournament_engine.schemas import competition_schemas
from tournament_engine.services.competition_service import CompetitionService

router = APIRouter()

@router.get("/groups", response_model=List[GroupModel])
async def list_groups_endpoint(service: CompetitionService = Depends(get_competition_service)):
    return service.list_groups()

@router.post("/admin/groups", response_model=GroupModel, status_code=status.HTTP_201_CREATED)
async def create_group_endpoint(
    group_in: competition_schemas.GroupCreate,
    service: CompetitionService = Depends(get_competition_service),
    _role: str = Depends(require_admin),
):
    return service.add_group(name=group_in.name, color=group_in.color)
