import asyncio
import logging
import re
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hackjudge.auth.jwt import Identity
from hackjudge.errors import (
    Forbidden, MissingFields, InvalidType, InvalidUrl, OutOfWindow, WrongTeam,
    UnsupportedMediaType, PersistenceFailure, StorageUnavailable
)
from hackjudge.models import Deliverable, DeliverableType, Team, UserRole
from hackjudge.services.directory import Directory
from hackjudge.services.phase_gate import PhaseWindowGate
from hackjudge.utils.storage import LocalBlobStore
from hackjudge.utils.upsert import dialect_insert

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

SUBMITTER_ROLES = (UserRole.PARTICIPANT, UserRole.ADMIN)

# Per (team, type) slot: the replaced-blob lookup, the upsert and the cleanup run under it
slot_locks: Dict[Tuple[uuid.UUID, str], asyncio.Lock] = defaultdict(asyncio.Lock)


def parse_deliverable_type(value: Optional[str]) -> DeliverableType:
    try:
        return DeliverableType(value)
    except ValueError:
        raise InvalidType(
            f"Unknown deliverable type '{value}', expected one of: {', '.join(t.value for t in DeliverableType)}"
        )


class DeliverableIntake:
    def __init__(
            self,
            session: AsyncSession,
            directory: Directory,
            gate: PhaseWindowGate,
            blob_store: LocalBlobStore,
            grace: timedelta = timedelta(0)
    ):
        self.session = session
        self.directory = directory
        self.gate = gate
        self.blob_store = blob_store
        self.grace = grace

    async def submit_file(
            self,
            identity: Identity,
            team_numero: Optional[int],
            type_value: Optional[str],
            filename: Optional[str],
            content_type: Optional[str],
            data: bytes
    ) -> Deliverable:
        """Store a PDF deliverable; the size ceiling is enforced while the upload is read"""
        if content_type != PDF_CONTENT_TYPE:
            raise UnsupportedMediaType(f"Deliverables must be {PDF_CONTENT_TYPE}, got '{content_type}'")

        self._check_role(identity)
        if team_numero is None or not type_value:
            raise MissingFields("team_numero and type are required")

        deliverable_type = parse_deliverable_type(type_value)
        if deliverable_type.is_link:
            raise InvalidType(f"'{deliverable_type.value}' is submitted as a link, not as a file")

        team = await self._admit(identity, team_numero, deliverable_type)

        path = await self.blob_store.put(
            f"teams/{team.numero}/{deliverable_type.value}", filename or "deliverable.pdf", data
        )
        async with slot_locks[(team.id, deliverable_type.value)]:
            previous = await self._current_value(team.id, deliverable_type)
            try:
                deliverable = await self._write(identity, team, deliverable_type, path, filename)
            except PersistenceFailure:
                await self.blob_store.delete(path)
                raise

            if previous and previous != path:
                try:
                    await self.blob_store.delete(previous)
                except StorageUnavailable as e:
                    logger.warning("Could not remove replaced deliverable %s: %s", previous, e.detail)
        return deliverable

    async def submit_link(
            self,
            identity: Identity,
            team_numero: Optional[int],
            url: Optional[str]
    ) -> Deliverable:
        self._check_role(identity)
        if team_numero is None or not url:
            raise MissingFields("team_numero and url are required")

        url = url.strip()
        if not URL_PATTERN.match(url):
            raise InvalidUrl("The link must start with http:// or https://")

        team = await self._admit(identity, team_numero, DeliverableType.MVP_LINK)
        return await self._write(identity, team, DeliverableType.MVP_LINK, url, None)

    async def list_for_team(self, identity: Identity, team_numero: int) -> List[Deliverable]:
        team = await self.directory.resolve_team(team_numero)
        if identity.role == UserRole.PARTICIPANT and identity.team_id != team.id:
            raise WrongTeam("Participants can only view their own team's deliverables")
        result = await self.session.execute(
            select(Deliverable)
            .where(Deliverable.team_id == team.id)
            .order_by(Deliverable.type)
        )
        return list(result.scalars().all())

    def _check_role(self, identity: Identity) -> None:
        if identity.role not in SUBMITTER_ROLES:
            raise Forbidden("Only participants and administrators can submit deliverables")

    async def _admit(self, identity: Identity, team_numero: int, deliverable_type: DeliverableType) -> Team:
        """Window and ownership checks; returns the target team"""
        team = await self.directory.resolve_team(team_numero)

        phase = deliverable_type.phase
        if not await self.gate.is_open(phase, grace=self.grace):
            raise OutOfWindow(phase.value)

        if identity.role == UserRole.PARTICIPANT:
            if identity.team_id is None or identity.team_id != team.id:
                logger.info("Participant %s tried to submit for team %s", identity.email, team.numero)
                raise WrongTeam("You can only submit deliverables for your own team")
        return team

    async def _current_value(self, team_id: uuid.UUID, deliverable_type: DeliverableType) -> Optional[str]:
        result = await self.session.execute(
            select(Deliverable.value).where(
                Deliverable.team_id == team_id,
                Deliverable.type == deliverable_type.value
            ).with_for_update()
        )
        return result.scalar_one_or_none()

    async def _write(
            self,
            identity: Identity,
            team: Team,
            deliverable_type: DeliverableType,
            value: str,
            filename: Optional[str]
    ) -> Deliverable:
        now = datetime.now(timezone.utc)
        is_late = await self.gate.is_late(deliverable_type.phase, now)
        row = {
            "value": value,
            "original_filename": filename,
            "submitted_by": identity.id,
            "submitted_at": now,
            "is_late": is_late,
        }
        stmt = dialect_insert(self.session, Deliverable).values(
            id=uuid.uuid4(),
            team_id=team.id,
            type=deliverable_type.value,
            **row
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Deliverable.team_id, Deliverable.type],
            set_={name: getattr(stmt.excluded, name) for name in row}
        ).returning(Deliverable.id)

        try:
            result = await self.session.execute(stmt)
            deliverable_id = result.scalar_one()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Deliverable write failed: %s", e)
            raise PersistenceFailure(str(e))

        logger.info(
            "Deliverable stored: team=%s type=%s late=%s by=%s",
            team.numero, deliverable_type.value, is_late, identity.email
        )
        return await self.session.get(Deliverable, deliverable_id, populate_existing=True)
