from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from hackjudge.auth.jwt import Identity, get_current_identity, require_roles
from hackjudge.models import UserRole
from hackjudge.schemas.deliverable import DeliverableLinkRequest, DeliverableResponse, DeliverableSubmitResponse
from hackjudge.services.deliverables import DeliverableIntake
from hackjudge.dependencies import get_deliverable_intake
from hackjudge.settings import settings
from hackjudge.utils.storage import read_upload

router = APIRouter(prefix="/deliverables", tags=["deliverables"])


@router.post("/upload", response_model=DeliverableSubmitResponse)
async def upload_deliverable(
        file: UploadFile = File(...),
        team_numero: Optional[int] = Form(None, alias="teamNumero"),
        team_numero_snake: Optional[int] = Form(None, alias="team_numero"),
        type: Optional[str] = Form(None),
        identity: Identity = Depends(require_roles(UserRole.PARTICIPANT, UserRole.ADMIN)),
        intake: DeliverableIntake = Depends(get_deliverable_intake)
):
    """Upload a PDF deliverable for a team; replaces the previous one of the same type"""
    data = await read_upload(file, settings.max_upload_size)
    deliverable = await intake.submit_file(
        identity,
        team_numero if team_numero is not None else team_numero_snake,
        type,
        file.filename,
        file.content_type,
        data
    )
    return DeliverableSubmitResponse(deliverable=DeliverableResponse.model_validate(deliverable))


@router.post("/link", response_model=DeliverableSubmitResponse)
async def submit_link(
        payload: DeliverableLinkRequest,
        identity: Identity = Depends(require_roles(UserRole.PARTICIPANT, UserRole.ADMIN)),
        intake: DeliverableIntake = Depends(get_deliverable_intake)
):
    """Submit the MVP link of a team"""
    deliverable = await intake.submit_link(identity, payload.team_numero, payload.url)
    return DeliverableSubmitResponse(deliverable=DeliverableResponse.model_validate(deliverable))


@router.get("/team/{numero}", response_model=List[DeliverableResponse])
async def get_team_deliverables(
        numero: int,
        identity: Identity = Depends(get_current_identity),
        intake: DeliverableIntake = Depends(get_deliverable_intake)
):
    return await intake.list_for_team(identity, numero)
