from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATA_DIR: str = "data"
    LOG_LEVEL: str = "INFO"
    ADMIN_ROLES: List[str] = ["Admin"]
    SCORING_ROLES: List[str] = ["Admin", "Committee Head"]
    DEFAULT_SCORE_STATUS: str = "Completed"

    class Config:
        env_file = ".env"

settings = Settings()
