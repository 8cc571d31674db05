from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hackjudge.db import get_session
from hackjudge.schemas.ranking import TeamStanding
from hackjudge.services.ranking import compute_ranking

router = APIRouter(prefix="/ranking", tags=["ranking"])


@router.get("", response_model=List[TeamStanding])
async def get_ranking(session: AsyncSession = Depends(get_session)):
    """Public standings of all teams"""
    return await compute_ranking(session)
