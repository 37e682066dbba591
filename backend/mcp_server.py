"""FastMCP server exposing quest sessions as MCP tools.

Tools:
  - list_adventures()                               adventure summaries
  - start_session(adventure_id, players)            new session progress
  - submit_answer(session_id, puzzle_id, text)      validation result
  - request_hint(session_id, puzzle_id)             hint result
  - submit_decision(session_id, decision_id, option_id, player_id)
  - end_session(session_id)                         ending, narrative, score
  - get_progress(session_id)                        current progress snapshot

Tools share the live session registry (backend.sessions) with the HTTP API.
Engine errors are returned as {"error": ...} dicts rather than raised, so an
agent can read the reason code and try something else.

Usage:
    uv run python -m backend.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from backend import sessions, storage
from cluequest import InvalidStateError, NotFoundError
from cluequest.actions import RequestHint, SubmitAnswer, SubmitDecision

mcp = FastMCP("cluequest")


def _error(exc: Exception) -> dict:
    if isinstance(exc, InvalidStateError):
        return {"error": exc.to_dict()}
    if isinstance(exc, ValueError):
        return {"error": {"reason": "invalid_team", "message": str(exc)}}
    return {"error": {"reason": "not_found", "message": str(exc)}}


@mcp.tool()
def list_adventures() -> list[dict]:
    """List the adventures that can be played."""
    return storage.list_adventures()


@mcp.tool()
def start_session(adventure_id: str, players: list[str]) -> dict:
    """Start a session for a team. Returns the initial progress."""
    try:
        return sessions.start_session(adventure_id, players).snapshot()
    except (NotFoundError, InvalidStateError, ValueError) as e:
        return _error(e)


@mcp.tool()
def submit_answer(session_id: str, puzzle_id: str, text: str) -> dict:
    """Submit an answer for a puzzle."""
    try:
        action = SubmitAnswer(puzzle_id=puzzle_id, text=text)
        return sessions.apply_action(session_id, action).model_dump()
    except (NotFoundError, InvalidStateError) as e:
        return _error(e)


@mcp.tool()
def request_hint(session_id: str, puzzle_id: str) -> dict:
    """Request the next hint for a puzzle (depends on attempts made)."""
    try:
        action = RequestHint(puzzle_id=puzzle_id)
        return sessions.apply_action(session_id, action).model_dump()
    except (NotFoundError, InvalidStateError) as e:
        return _error(e)


@mcp.tool()
def submit_decision(session_id: str, decision_id: str, option_id: str, player_id: str) -> dict:
    """Submit one player's choice for a team decision."""
    try:
        action = SubmitDecision(decision_id=decision_id, option_id=option_id, player_id=player_id)
        return sessions.apply_action(session_id, action).model_dump()
    except (NotFoundError, InvalidStateError) as e:
        return _error(e)


@mcp.tool()
def end_session(session_id: str) -> dict:
    """End the session and return the ending, narrative and final score."""
    try:
        return sessions.end_session(session_id).model_dump(mode="json")
    except (NotFoundError, InvalidStateError) as e:
        return _error(e)


@mcp.tool()
def get_progress(session_id: str) -> dict:
    """Current progress of a live session."""
    try:
        return sessions.get_session(session_id).snapshot()
    except NotFoundError as e:
        return _error(e)


if __name__ == "__main__":
    import os
    from pathlib import Path

    storage.init_storage(Path(os.getenv("DATA_DIR", "data")))
    mcp.run()
