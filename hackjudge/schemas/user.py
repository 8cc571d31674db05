import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, EmailStr

from hackjudge.models import UserRole


class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    role: UserRole
    full_name: Optional[str] = None
    team_numero: Optional[int] = None
    conflict_team_numbers: List[int] = []


class UserResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: UserRole
    team_id: Optional[UUID] = None
    is_active: bool
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True


class LoginUser(BaseModel):
    id: UUID
    email: str
    role: UserRole
    team_id: Optional[UUID] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    ok: bool = True
    token: str
    token_type: str = "bearer"
    user: LoginUser


class IdentityResponse(BaseModel):
    id: UUID
    email: str
    role: UserRole
    team_id: Optional[UUID] = None

    class Config:
        from_attributes = True


class MeResponse(BaseModel):
    ok: bool = True
    user: IdentityResponse


class JudgeConflictsUpdate(BaseModel):
    team_numbers: List[int]


class JudgeResponse(BaseModel):
    judge_id: UUID
    email: str
    conflict_team_numbers: List[int]
