from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field


class TeamCreate(BaseModel):
    numero: int = Field(..., ge=0)
    name: str = Field(..., min_length=1, max_length=255)


class TeamResponse(BaseModel):
    id: UUID
    numero: int
    name: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
