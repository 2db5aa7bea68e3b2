import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tournament_engine.api.endpoints import competitions as competition_endpoints
from tournament_engine.api.endpoints import groups as group_endpoints
from tournament_engine.api.endpoints import matches as match_endpoints
from tournament_engine.core.config import settings
from tournament_engine.core.errors import Conflict, EngineError, InvalidInput, NotFound, Unsupported

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    InvalidInput.kind: status.HTTP_400_BAD_REQUEST,
    NotFound.kind: status.HTTP_404_NOT_FOUND,
    Unsupported.kind: 422,
    Conflict.kind: status.HTTP_409_CONFLICT,
}

app = FastAPI(title="Convention Tournament Engine")

@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    status_code = ERROR_STATUS_CODES.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())

# Include routers
app.include_router(competition_endpoints.router, prefix="/api", tags=["Competitions"])
app.include_router(match_endpoints.router, prefix="/api", tags=["Matches"])
app.include_router(group_endpoints.router, prefix="/api", tags=["Groups"])


@app.get("/")
async def root():
    return {"message": "Convention Tournament Engine API"}
