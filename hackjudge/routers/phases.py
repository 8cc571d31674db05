from typing import List

from fastapi import APIRouter, Depends

from hackjudge.auth.jwt import Identity, get_current_identity, require_roles
from hackjudge.models import UserRole
from hackjudge.schemas.phase import PhaseWindowUpdate, PhaseWindowResponse
from hackjudge.services.phase_gate import PhaseWindowGate
from hackjudge.services.scoring import parse_phase
from hackjudge.dependencies import get_phase_gate

router = APIRouter(
    prefix="/phases",
    tags=["phases"]
)


@router.get("", response_model=List[PhaseWindowResponse])
async def get_phases(
        identity: Identity = Depends(get_current_identity),
        gate: PhaseWindowGate = Depends(get_phase_gate)
):
    """Windows of all phases and whether they accept submissions now"""
    windows = await gate.list_windows()
    return [
        PhaseWindowResponse(
            phase=window.phase,
            starts_at=window.starts_at,
            ends_at=window.ends_at,
            is_open=await gate.is_open(window.phase)
        )
        for window in windows
    ]


@router.put("/{phase}/window", response_model=PhaseWindowResponse)
async def set_phase_window(
        phase: str,
        payload: PhaseWindowUpdate,
        current_admin: Identity = Depends(require_roles(UserRole.ADMIN)),
        gate: PhaseWindowGate = Depends(get_phase_gate)
):
    """Set the submission window of a phase (admin only)"""
    phase_value = parse_phase(phase)
    window = await gate.set_window(phase_value, payload.starts_at, payload.ends_at)
    return PhaseWindowResponse(
        phase=window.phase,
        starts_at=window.starts_at,
        ends_at=window.ends_at,
        is_open=await gate.is_open(phase_value)
    )


@router.delete("/{phase}/window", response_model=PhaseWindowResponse)
async def clear_phase_window(
        phase: str,
        current_admin: Identity = Depends(require_roles(UserRole.ADMIN)),
        gate: PhaseWindowGate = Depends(get_phase_gate)
):
    """Remove the window of a phase, leaving it always open"""
    phase_value = parse_phase(phase)
    await gate.clear_window(phase_value)
    return PhaseWindowResponse(phase=phase_value, is_open=True)
