from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

class GroupModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = Field(min_length=1, max_length=100)
    color: Optional[str] = None # Display color, e.g. "#ff8800"

    class Config:
        from_attributes = True
        frozen = True
