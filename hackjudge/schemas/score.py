from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ScoreSubmitRequest(BaseModel):
    """Score payload; ranges are clamped by the service, not rejected here"""
    team_numero: Optional[int] = None
    phase: Optional[str] = None
    judge_email_override: Optional[str] = None
    canvas_score: Optional[int] = Field(None, description="canvas, 0..20")
    mvp_score: Optional[int] = Field(None, description="mvp, 0..30")
    impact: Optional[int] = Field(None, description="pitch, 0..100")
    business_model: Optional[int] = Field(None, description="pitch, 0..100")
    innovation: Optional[int] = Field(None, description="pitch, 0..100")
    viability: Optional[int] = Field(None, description="pitch, 0..100")
    extra_criterion: Optional[int] = Field(None, description="pitch, 0..100")
    notes: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OkResponse(BaseModel):
    ok: bool = True


class ScoreResponse(BaseModel):
    id: UUID
    team_numero: int
    phase: str
    canvas_score: Optional[int] = None
    mvp_score: Optional[int] = None
    impact: Optional[int] = None
    business_model: Optional[int] = None
    innovation: Optional[int] = None
    viability: Optional[int] = None
    extra_criterion: Optional[int] = None
    pitch_total: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
