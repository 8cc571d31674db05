"""
Score submission validator and writer.

A submission passes, in order: role check, required fields, phase check,
judge resolution, conflict-of-interest check, team resolution, optional
window gate, per-phase normalization (at least one field of the phase must
be present), and a single atomic write keyed by (judge, team, phase).
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hackjudge.auth.jwt import Identity
from hackjudge.errors import (
    Forbidden, MissingFields, InvalidPhase, ConflictOfInterest, OutOfWindow,
    Duplicate, PersistenceFailure
)
from hackjudge.models import Phase, Score, UserRole
from hackjudge.services.directory import Directory, normalize_email
from hackjudge.services.phase_gate import PhaseWindowGate
from hackjudge.utils.upsert import dialect_insert

logger = logging.getLogger(__name__)

UPSERT = "upsert"
REJECT = "reject"

# Score columns activated by each phase, with their closed ranges
PHASE_FIELDS: Dict[Phase, Dict[str, Tuple[int, int]]] = {
    Phase.CANVAS: {"canvas_score": (0, 20)},
    Phase.MVP: {"mvp_score": (0, 30)},
    Phase.PITCH: {
        "impact": (0, 100),
        "business_model": (0, 100),
        "innovation": (0, 100),
        "viability": (0, 100),
        "extra_criterion": (0, 100),
    },
}

SCORE_FIELDS = [name for fields in PHASE_FIELDS.values() for name in fields]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def parse_phase(value: Optional[str]) -> Phase:
    try:
        return Phase(value)
    except ValueError:
        raise InvalidPhase(f"Unknown phase '{value}', expected one of: {', '.join(p.value for p in Phase)}")


def normalize_fields(phase: Phase, fields: Dict[str, Optional[int]]) -> Dict[str, Optional[int]]:
    """
    Clamp the active phase's fields into their ranges and null every other field

    :param phase: phase of the submission
    :param fields: submitted values keyed by score column name
    :return: value for every score column
    """
    active = PHASE_FIELDS[phase]
    normalized = {}
    for name in SCORE_FIELDS:
        value = fields.get(name)
        if name in active and value is not None:
            low, high = active[name]
            normalized[name] = clamp(int(value), low, high)
        else:
            normalized[name] = None
    return normalized


@dataclass
class ScoreSubmission:
    team_numero: Optional[int]
    phase: Optional[str]
    judge_email_override: Optional[str] = None
    canvas_score: Optional[int] = None
    mvp_score: Optional[int] = None
    impact: Optional[int] = None
    business_model: Optional[int] = None
    innovation: Optional[int] = None
    viability: Optional[int] = None
    extra_criterion: Optional[int] = None
    notes: Optional[str] = None

    def score_fields(self) -> Dict[str, Optional[int]]:
        return {name: getattr(self, name) for name in SCORE_FIELDS}


class ScoreService:
    def __init__(
            self,
            session: AsyncSession,
            directory: Directory,
            gate: PhaseWindowGate,
            policy: str = UPSERT,
            enforce_window: bool = False
    ):
        if policy not in (UPSERT, REJECT):
            raise ValueError(f"Unknown resubmission policy: {policy}")
        self.session = session
        self.directory = directory
        self.gate = gate
        self.policy = policy
        self.enforce_window = enforce_window

    def effective_judge_email(self, identity: Identity, override: Optional[str]) -> str:
        if identity.role == UserRole.JUDGE:
            if override and normalize_email(override) != normalize_email(identity.email):
                logger.info("Ignoring judge email override from judge %s", identity.email)
            return normalize_email(identity.email)
        if identity.role == UserRole.ADMIN:
            return normalize_email(override or identity.email)
        raise Forbidden("Only judges and administrators can submit scores")

    async def submit(self, identity: Identity, submission: ScoreSubmission) -> Score:
        judge_email = self.effective_judge_email(identity, submission.judge_email_override)

        missing = [
            name for name, value in (("teamNumero", submission.team_numero), ("phase", submission.phase))
            if value is None or value == ""
        ]
        if missing:
            raise MissingFields(f"Missing required fields: {', '.join(missing)}")

        phase = parse_phase(submission.phase)
        judge = await self.directory.resolve_judge(judge_email)

        if submission.team_numero in judge.conflict_team_numbers:
            logger.info("Rejected score from %s for team %s: conflict of interest", judge.email, submission.team_numero)
            raise ConflictOfInterest(f"Judge {judge.email} has a conflict of interest with team {submission.team_numero}")

        team = await self.directory.resolve_team(submission.team_numero)

        if self.enforce_window and not await self.gate.is_open(phase):
            raise OutOfWindow(phase.value)

        values = normalize_fields(phase, submission.score_fields())
        if all(values[name] is None for name in PHASE_FIELDS[phase]):
            raise MissingFields(f"At least one of {', '.join(PHASE_FIELDS[phase])} is required for phase '{phase.value}'")
        score = await self._write(judge.judge_id, team.id, phase, values, submission.notes)
        logger.info(
            "Score stored: judge=%s team=%s phase=%s values=%s",
            judge.email, team.numero, phase.value,
            {name: value for name, value in values.items() if value is not None}
        )
        return score

    async def _write(
            self,
            judge_id: uuid.UUID,
            team_id: uuid.UUID,
            phase: Phase,
            values: Dict[str, Optional[int]],
            notes: Optional[str]
    ) -> Score:
        now = datetime.now(timezone.utc)
        row = dict(values, notes=notes, updated_at=now)
        stmt = dialect_insert(self.session, Score).values(
            id=uuid.uuid4(),
            judge_id=judge_id,
            team_id=team_id,
            phase=phase.value,
            created_at=now,
            **row
        )
        conflict_keys = [Score.judge_id, Score.team_id, Score.phase]
        if self.policy == UPSERT:
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict_keys,
                set_={name: getattr(stmt.excluded, name) for name in row}
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=conflict_keys)
        stmt = stmt.returning(Score.id)

        try:
            result = await self.session.execute(stmt)
            score_id = result.scalar_one_or_none()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Score write failed: %s", e)
            raise PersistenceFailure(str(e))

        if score_id is None:
            raise Duplicate(f"A {phase.value} score for this team was already submitted by this judge")
        return await self.session.get(Score, score_id, populate_existing=True)

    async def list_for_judge(self, email: str) -> List[Score]:
        judge = await self.directory.resolve_judge(email)
        result = await self.session.execute(
            select(Score)
            .options(selectinload(Score.team))
            .where(Score.judge_id == judge.judge_id)
            .order_by(Score.phase, Score.created_at)
        )
        return list(result.scalars().all())
