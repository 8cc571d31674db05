"""
Team/Judge directory.

Maps public team numbers to teams and judge emails to judge entries with
their conflict sets. Emails are normalized to lowercase wherever an identity
is keyed by email.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hackjudge.auth.utils import get_password_hash
from hackjudge.errors import (
    TeamNotFound, JudgeNotFound, UserNotFound, EmailTaken, Duplicate, PersistenceFailure
)
from hackjudge.models import User, Judge, JudgeConflict, Team, UserRole
from hackjudge.utils.upsert import dialect_insert

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass(frozen=True)
class JudgeEntry:
    judge_id: uuid.UUID
    email: str
    conflict_team_numbers: FrozenSet[int] = field(default_factory=frozenset)


class Directory:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def resolve_team(self, numero: int) -> Team:
        result = await self.session.execute(select(Team).where(Team.numero == numero))
        team = result.scalar_one_or_none()
        if team is None:
            raise TeamNotFound(f"Team {numero} not found")
        return team

    async def resolve_judge(self, email: str) -> JudgeEntry:
        email = normalize_email(email)
        result = await self.session.execute(
            select(Judge)
            .options(selectinload(Judge.conflicts))
            .where(Judge.email == email)
            .execution_options(populate_existing=True)
        )
        judge = result.scalar_one_or_none()
        if judge is None:
            raise JudgeNotFound(f"No judge registered for {email}")
        return JudgeEntry(
            judge_id=judge.id,
            email=judge.email,
            conflict_team_numbers=frozenset(judge.conflict_team_numbers),
        )

    async def ensure_judge(self, email: str, user_id: Optional[uuid.UUID] = None) -> None:
        """Create the judge entry for email unless one exists; an existing entry is left untouched"""
        stmt = dialect_insert(self.session, Judge).values(
            id=uuid.uuid4(),
            email=normalize_email(email),
            user_id=user_id,
        ).on_conflict_do_nothing(index_elements=[Judge.email])
        await self.session.execute(stmt)

    async def create_user(
            self,
            email: str,
            password: str,
            role: UserRole,
            full_name: Optional[str] = None,
            team_numero: Optional[int] = None,
            conflict_team_numbers: Iterable[int] = (),
    ) -> User:
        """Create a user and, for judges, the judge entry, in one transaction"""
        email = normalize_email(email)
        team_id = None
        if team_numero is not None:
            team_id = (await self.resolve_team(team_numero)).id

        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=get_password_hash(password),
            full_name=full_name,
            role=role.value,
            team_id=team_id,
            is_active=True,
        )
        try:
            self.session.add(user)
            await self.session.flush()
            if role == UserRole.JUDGE:
                await self.ensure_judge(email, user_id=user.id)
                conflicts = set(conflict_team_numbers)
                if conflicts:
                    await self._replace_conflicts(email, conflicts)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise EmailTaken(f"Email {email} is already registered")
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure(str(e))

        await self.session.refresh(user)
        logger.info("Created %s user %s", role.value, email)
        return user

    async def deactivate_user(self, user_id: uuid.UUID) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found")
        user.is_active = False
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure(str(e))
        logger.info("Deactivated user %s", user.email)
        return user

    async def list_users(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.created_at))
        return list(result.scalars().all())

    async def set_conflicts(self, email: str, team_numbers: Iterable[int]) -> JudgeEntry:
        """Replace the conflict set of a judge"""
        email = normalize_email(email)
        numbers = set(team_numbers)
        await self.resolve_judge(email)
        try:
            await self._replace_conflicts(email, numbers)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure(str(e))
        return await self.resolve_judge(email)

    async def _replace_conflicts(self, email: str, team_numbers: set) -> None:
        judge_id = (await self.session.execute(
            select(Judge.id).where(Judge.email == email)
        )).scalar_one()
        await self.session.execute(delete(JudgeConflict).where(JudgeConflict.judge_id == judge_id))
        for numero in sorted(team_numbers):
            self.session.add(JudgeConflict(id=uuid.uuid4(), judge_id=judge_id, team_numero=numero))
        await self.session.flush()

    async def create_team(self, numero: int, name: str) -> Team:
        team = Team(id=uuid.uuid4(), numero=numero, name=name)
        try:
            self.session.add(team)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise Duplicate(f"Team number {numero} is already taken")
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure(str(e))
        await self.session.refresh(team)
        logger.info("Created team %s (%s)", numero, name)
        return team

    async def list_teams(self) -> List[Team]:
        result = await self.session.execute(select(Team).order_by(Team.numero))
        return list(result.scalars().all())
