import uuid
from typing import List

from fastapi import APIRouter, Depends

from hackjudge.auth.jwt import Identity, require_roles
from hackjudge.models import UserRole
from hackjudge.schemas.user import UserCreate, UserResponse, JudgeConflictsUpdate, JudgeResponse
from hackjudge.services.directory import Directory
from hackjudge.dependencies import get_directory

router = APIRouter(tags=["users"])

admin_only = require_roles(UserRole.ADMIN)


@router.post("/users", response_model=UserResponse)
async def create_user(
        user_data: UserCreate,
        current_admin: Identity = Depends(admin_only),
        directory: Directory = Depends(get_directory)
):
    """Create a user; judges also get their judge directory entry"""
    return await directory.create_user(
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        full_name=user_data.full_name,
        team_numero=user_data.team_numero,
        conflict_team_numbers=user_data.conflict_team_numbers
    )


@router.get("/users", response_model=List[UserResponse])
async def list_users(
        current_admin: Identity = Depends(admin_only),
        directory: Directory = Depends(get_directory)
):
    return await directory.list_users()


@router.post("/users/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
        user_id: uuid.UUID,
        current_admin: Identity = Depends(admin_only),
        directory: Directory = Depends(get_directory)
):
    return await directory.deactivate_user(user_id)


@router.put("/judges/{email}/conflicts", response_model=JudgeResponse)
async def set_judge_conflicts(
        email: str,
        payload: JudgeConflictsUpdate,
        current_admin: Identity = Depends(admin_only),
        directory: Directory = Depends(get_directory)
):
    """Replace the set of teams a judge must not score"""
    judge = await directory.set_conflicts(email, payload.team_numbers)
    return JudgeResponse(
        judge_id=judge.judge_id,
        email=judge.email,
        conflict_team_numbers=sorted(judge.conflict_team_numbers)
    )
