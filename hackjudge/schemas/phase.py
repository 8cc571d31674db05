from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from hackjudge.models.enums import Phase


class PhaseWindowUpdate(BaseModel):
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None


class PhaseWindowResponse(BaseModel):
    phase: Phase
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    is_open: bool
