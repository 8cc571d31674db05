from .auth import router as auth_router
from .scores import router as scores_router
from .deliverables import router as deliverables_router
from .users import router as users_router
from .teams import router as teams_router
from .phases import router as phases_router
from .ranking import router as ranking_router

__all__ = [
    'auth_router',
    'scores_router',
    'deliverables_router',
    'users_router',
    'teams_router',
    'phases_router',
    'ranking_router'
]
