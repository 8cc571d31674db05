from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from hackjudge.auth.jwt import Identity, create_access_token, get_current_identity
from hackjudge.auth.utils import verify_password
from hackjudge.db import get_session
from hackjudge.errors import MissingFields, InvalidCredentials
from hackjudge.models import User
from hackjudge.schemas.user import UserLogin, LoginResponse, LoginUser, MeResponse, IdentityResponse
from hackjudge.services.directory import normalize_email

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(user_data: UserLogin, session: AsyncSession = Depends(get_session)):
    """Exchange email and password for an access token"""
    if not user_data.email or not user_data.password:
        raise MissingFields("email and password are required")

    query = select(User).where(
        User.email == normalize_email(user_data.email),
        User.is_active == True
    )
    result = await session.execute(query)
    user = result.scalar_one_or_none()

    if not user or not verify_password(user_data.password, user.password_hash):
        raise InvalidCredentials("Invalid email or password")

    return LoginResponse(
        token=create_access_token(user),
        user=LoginUser.model_validate(user)
    )


@router.get("/me", response_model=MeResponse)
async def read_me(identity: Identity = Depends(get_current_identity)):
    return MeResponse(user=IdentityResponse.model_validate(identity))
