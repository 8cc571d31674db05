from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class DeliverableLinkRequest(BaseModel):
    team_numero: Optional[int] = None
    url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DeliverableResponse(BaseModel):
    id: UUID
    type: str
    value: str
    original_filename: Optional[str] = None
    submitted_at: datetime
    is_late: bool

    class Config:
        from_attributes = True


class DeliverableSubmitResponse(BaseModel):
    ok: bool = True
    deliverable: DeliverableResponse
