from typing import List

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from hackjudge.models import Phase, Score, Team
from hackjudge.schemas.ranking import TeamStanding


async def compute_ranking(session: AsyncSession) -> List[TeamStanding]:
    """Standings of all teams from the stored scores, best total first"""
    pitch_total = (
        func.coalesce(Score.impact, 0) +
        func.coalesce(Score.business_model, 0) +
        func.coalesce(Score.innovation, 0) +
        func.coalesce(Score.viability, 0) +
        func.coalesce(Score.extra_criterion, 0)
    )
    query = select(
        Team.numero.label('numero'),
        Team.name.label('name'),
        func.avg(Score.canvas_score).label('canvas_average'),
        func.avg(Score.mvp_score).label('mvp_average'),
        func.avg(
            case((Score.phase == Phase.PITCH.value, pitch_total), else_=None)
        ).label('pitch_average'),
        func.count(Score.judge_id.distinct()).label('evaluations_count'),
    ).outerjoin(
        Score,
        Team.id == Score.team_id
    ).group_by(
        Team.id,
        Team.numero,
        Team.name
    )

    result = await session.execute(query)

    standings = []
    for row in result.all():
        canvas = float(row.canvas_average) if row.canvas_average is not None else None
        mvp = float(row.mvp_average) if row.mvp_average is not None else None
        pitch = float(row.pitch_average) if row.pitch_average is not None else None
        standings.append(TeamStanding(
            numero=row.numero,
            name=row.name,
            canvas_average=canvas,
            mvp_average=mvp,
            pitch_average=pitch,
            total=round((canvas or 0) + (mvp or 0) + (pitch or 0), 2),
            evaluations_count=row.evaluations_count,
        ))

    standings.sort(key=lambda standing: (-standing.total, standing.numero))
    for position, standing in enumerate(standings, 1):
        standing.position = position
    return standings
