from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

from jose import JWTError, jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from hackjudge.errors import Unauthenticated, Forbidden
from hackjudge.models import User, UserRole
from hackjudge.settings import settings

bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Authorization header using the Bearer scheme",
    auto_error=False
)


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from an access token"""
    id: uuid.UUID
    email: str
    role: UserRole
    team_id: Optional[uuid.UUID] = None


def create_access_token(
        user: User,
        expires_delta: Optional[timedelta] = None
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.access_token_expire_hours)

    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": UserRole(user.role).value,
        "team_id": str(user.team_id) if user.team_id else None,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> Identity:
    """Verify the signature and expiry of a token and decode the identity it carries"""
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
        team_id = payload.get("team_id")
        return Identity(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
            team_id=uuid.UUID(team_id) if team_id else None,
        )
    except (JWTError, KeyError, ValueError, TypeError):
        raise Unauthenticated("Could not validate credentials")


async def get_current_identity(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Not authenticated")
    return decode_access_token(credentials.credentials)


def require_roles(*roles: UserRole):
    """Dependency factory: resolve the caller and require one of the given roles"""
    allowed = frozenset(roles)

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise Forbidden(
                f"Role '{identity.role.value}' is not allowed; "
                f"required one of: {', '.join(sorted(role.value for role in allowed))}"
            )
        return identity

    return dependency
