from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from tournament_engine.core.config import settings
from tournament_engine.services.competition_service import CompetitionService
from tournament_engine.storage.json_store import JsonCompetitionRepository

@lru_cache()
def get_repository() -> JsonCompetitionRepository:
    return JsonCompetitionRepository(data_dir=settings.DATA_DIR)

def get_competition_service(repository: JsonCompetitionRepository = Depends(get_repository)) -> CompetitionService:
    return CompetitionService(repository)

# --- Authorization ---
# Identity is established upstream; the role arrives with the request.

async def get_current_role(x_user_role: Optional[str] = Header(None)) -> str:
    if not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return x_user_role

async def require_admin(role: str = Depends(get_current_role)) -> str:
    if role not in settings.ADMIN_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized. Admin access required.")
    return role

async def require_scorer(role: str = Depends(get_current_role)) -> str:
    if role not in settings.SCORING_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized. Admin or Committee Head access required.",
        )
    return role
