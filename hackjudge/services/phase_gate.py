"""
Phase window gate.

A phase accepts submissions while ``starts_at <= now < ends_at``. A phase
without a configured window is always open, and a null bound is open-ended
on that side.

If the window lookup itself fails and ``fail_open`` is set, the gate logs a
warning and reports the phase as open. This keeps uploads flowing during a
database outage at the cost of not enforcing deadlines while it lasts;
operators turn it off with PHASE_WINDOW_FAIL_OPEN=false.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from hackjudge.errors import InvalidWindow, PersistenceFailure, StorageUnavailable
from hackjudge.models import Phase, PhaseWindow
from hackjudge.utils.upsert import dialect_insert

logger = logging.getLogger(__name__)

# Errors of a failed window lookup; an unreachable database surfaces as a raw
# OSError or timeout from the driver, not wrapped by SQLAlchemy
LOOKUP_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite returns them without tzinfo)"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Window:
    phase: Phase
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None

    def contains(self, now: datetime, grace: timedelta = timedelta(0)) -> bool:
        if self.starts_at is not None and now < self.starts_at:
            return False
        if self.ends_at is not None and now >= self.ends_at + grace:
            return False
        return True


class PhaseWindowGate:
    def __init__(self, session_factory: sessionmaker, fail_open: bool = True):
        self.session_factory = session_factory
        self.fail_open = fail_open

    async def get_window(self, phase: Phase) -> Optional[Window]:
        """Configured window of a phase, None when unconfigured; lookup errors propagate"""
        async with self.session_factory() as session:
            row = await session.get(PhaseWindow, phase.value)
        if row is None:
            return None
        return Window(phase=phase, starts_at=as_utc(row.starts_at), ends_at=as_utc(row.ends_at))

    async def is_open(
            self,
            phase: Phase,
            now: Optional[datetime] = None,
            grace: timedelta = timedelta(0)
    ) -> bool:
        now = as_utc(now) or datetime.now(timezone.utc)
        try:
            window = await self.get_window(phase)
        except LOOKUP_ERRORS as e:
            if self.fail_open:
                logger.warning(
                    "Window lookup for phase '%s' failed, treating it as open (fail-open): %s",
                    phase.value, e
                )
                return True
            logger.error("Window lookup for phase '%s' failed: %s", phase.value, e)
            raise StorageUnavailable(f"Phase window lookup failed for '{phase.value}'")

        if window is None:
            return True
        return window.contains(now, grace)

    async def is_late(self, phase: Phase, now: Optional[datetime] = None) -> bool:
        now = as_utc(now) or datetime.now(timezone.utc)
        try:
            window = await self.get_window(phase)
        except LOOKUP_ERRORS as e:
            logger.warning("Window lookup for phase '%s' failed, lateness not computed: %s", phase.value, e)
            return False
        return window is not None and window.ends_at is not None and now >= window.ends_at

    async def set_window(
            self,
            phase: Phase,
            starts_at: Optional[datetime],
            ends_at: Optional[datetime]
    ) -> Window:
        starts_at, ends_at = as_utc(starts_at), as_utc(ends_at)
        if starts_at is not None and ends_at is not None and starts_at >= ends_at:
            raise InvalidWindow("starts_at must be earlier than ends_at")

        try:
            async with self.session_factory() as session:
                stmt = dialect_insert(session, PhaseWindow).values(
                    phase=phase.value,
                    starts_at=starts_at,
                    ends_at=ends_at,
                    updated_at=datetime.now(timezone.utc),
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[PhaseWindow.phase],
                    set_={
                        "starts_at": stmt.excluded.starts_at,
                        "ends_at": stmt.excluded.ends_at,
                        "updated_at": stmt.excluded.updated_at,
                    }
                )
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceFailure(str(e))

        logger.info("Window for phase '%s' set to [%s, %s)", phase.value, starts_at, ends_at)
        return Window(phase=phase, starts_at=starts_at, ends_at=ends_at)

    async def clear_window(self, phase: Phase) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(delete(PhaseWindow).where(PhaseWindow.phase == phase.value))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceFailure(str(e))
        logger.info("Window for phase '%s' cleared", phase.value)

    async def list_windows(self) -> List[Window]:
        """Windows of every phase, unconfigured phases included with null bounds"""
        async with self.session_factory() as session:
            result = await session.execute(select(PhaseWindow))
            rows = {row.phase: row for row in result.scalars().all()}

        windows = []
        for phase in Phase:
            row = rows.get(phase.value)
            if row is None:
                windows.append(Window(phase=phase))
            else:
                windows.append(Window(phase=phase, starts_at=as_utc(row.starts_at), ends_at=as_utc(row.ends_at)))
        return windows
