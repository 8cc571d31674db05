from typing import List

from fastapi import APIRouter, Depends

from hackjudge.auth.jwt import Identity, get_current_identity, require_roles
from hackjudge.models import UserRole
from hackjudge.schemas.team import TeamCreate, TeamResponse
from hackjudge.services.directory import Directory
from hackjudge.dependencies import get_directory

router = APIRouter(prefix="/teams", tags=["teams"])


@router.post("", response_model=TeamResponse)
async def create_team(
        team_data: TeamCreate,
        current_admin: Identity = Depends(require_roles(UserRole.ADMIN)),
        directory: Directory = Depends(get_directory)
):
    return await directory.create_team(team_data.numero, team_data.name)


@router.get("", response_model=List[TeamResponse])
async def list_teams(
        identity: Identity = Depends(get_current_identity),
        directory: Directory = Depends(get_directory)
):
    return await directory.list_teams()
