from .enums import UserRole, Phase, DeliverableType
from .user import User, Judge, JudgeConflict
from .team import Team
from .phase import PhaseWindow
from .score import Score
from .deliverable import Deliverable

__all__ = [
    'User',
    'Judge',
    'JudgeConflict',
    'Team',
    'PhaseWindow',
    'Score',
    'Deliverable',
    'UserRole',
    'Phase',
    'DeliverableType',
]
