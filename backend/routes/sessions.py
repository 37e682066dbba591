"""Session endpoints: start, progress, player actions, end, result."""

from fastapi import APIRouter, HTTPException

from backend import sessions, storage
from cluequest.actions import RequestHint, SubmitAnswer, SubmitDecision

from .models import ActionBody, StartSessionBody

router = APIRouter()


@router.post("/sessions")
async def start_session(body: StartSessionBody):
    """Start a playthrough of an adventure for a team."""
    session = sessions.start_session(body.adventure_id, body.players)
    return session.snapshot()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    """Current progress of a live session."""
    return sessions.get_session(session_id).snapshot()


@router.get("/sessions/{session_id}/scenes/{scene_id}")
async def scene_status(session_id: str, scene_id: str):
    """Unlock report for a scene (status and missing prerequisites)."""
    return sessions.get_session(session_id).unlock_status(scene_id)


@router.post("/sessions/{session_id}/scenes/{scene_id}/fail")
async def fail_scene(session_id: str, scene_id: str):
    """Mark an in-progress scene as failed."""
    return sessions.fail_scene(session_id, scene_id).snapshot()


@router.post("/sessions/{session_id}/answer")
async def submit_answer(session_id: str, body: SubmitAnswer):
    """Validate a puzzle answer."""
    return sessions.apply_action(session_id, body)


@router.post("/sessions/{session_id}/hint")
async def request_hint(session_id: str, body: RequestHint):
    """Request the hint unlocked by the puzzle's attempt count."""
    return sessions.apply_action(session_id, body)


@router.post("/sessions/{session_id}/decision")
async def submit_decision(session_id: str, body: SubmitDecision):
    """Submit one player's choice for a decision."""
    return sessions.apply_action(session_id, body)


@router.post("/sessions/{session_id}/actions")
async def apply_action(session_id: str, body: ActionBody):
    """Run any action, tagged by its "kind" field."""
    return sessions.apply_action(session_id, body.root)


@router.post("/sessions/{session_id}/end")
async def end_session(session_id: str):
    """End the session: resolve the ending and compute the final score."""
    return sessions.end_session(session_id)


@router.get("/sessions/{session_id}/result")
async def get_result(session_id: str):
    """Stored outcome of a finished session."""
    result = storage.get_result(session_id)
    if not result:
        raise HTTPException(404, "Result not found")
    return result
