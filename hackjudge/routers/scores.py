from typing import List

from fastapi import APIRouter, Depends

from hackjudge.auth.jwt import Identity, require_roles
from hackjudge.models import UserRole
from hackjudge.schemas.score import ScoreSubmitRequest, OkResponse, ScoreResponse
from hackjudge.services.scoring import ScoreService, ScoreSubmission
from hackjudge.dependencies import get_score_service

router = APIRouter(
    prefix="/scores",
    tags=["scores"]
)


@router.post("", response_model=OkResponse)
async def submit_score(
        payload: ScoreSubmitRequest,
        identity: Identity = Depends(require_roles(UserRole.JUDGE, UserRole.ADMIN)),
        service: ScoreService = Depends(get_score_service)
):
    """Submit or replace the caller's score of a team for a phase"""
    await service.submit(identity, ScoreSubmission(**payload.model_dump()))
    return OkResponse()


@router.get("/mine", response_model=List[ScoreResponse])
async def get_my_scores(
        identity: Identity = Depends(require_roles(UserRole.JUDGE)),
        service: ScoreService = Depends(get_score_service)
):
    """Scores submitted by the current judge"""
    scores = await service.list_for_judge(identity.email)
    return [
        ScoreResponse(
            id=score.id,
            team_numero=score.team.numero,
            phase=score.phase,
            canvas_score=score.canvas_score,
            mvp_score=score.mvp_score,
            impact=score.impact,
            business_model=score.business_model,
            innovation=score.innovation,
            viability=score.viability,
            extra_criterion=score.extra_criterion,
            pitch_total=score.get_pitch_total(),
            notes=score.notes,
            created_at=score.created_at,
            updated_at=score.updated_at
        )
        for score in scores
    ]
