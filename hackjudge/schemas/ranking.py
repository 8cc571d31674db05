from typing import Optional
from pydantic import BaseModel


class TeamStanding(BaseModel):
    """Standing of a team in the ranking"""
    position: int = 0
    numero: int
    name: str
    canvas_average: Optional[float] = None
    mvp_average: Optional[float] = None
    pitch_average: Optional[float] = None
    total: float
    evaluations_count: int
