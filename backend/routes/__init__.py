"""FastAPI API endpoints under /api.

Endpoint groups: health + settings, adventures (list, import, stats,
leaderboard), sessions (start, progress, scene status, answer, hint,
decision, generic tagged action, fail scene, end, result).

Engine errors are mapped to HTTP responses in backend.app:
NotFoundError → 404, InvalidStateError → 409, AdventureConfigError → 422.
"""

from fastapi import APIRouter

from .adventures import router as adventures_router
from .sessions import router as sessions_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(adventures_router)
router.include_router(sessions_router)
