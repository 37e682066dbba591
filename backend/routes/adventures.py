"""Adventure definitions: list, get, import, delete, stats, leaderboard."""

from typing import Any

from fastapi import APIRouter, HTTPException

from backend import storage

from .models import LeaderboardEntry

router = APIRouter()


@router.get("/adventures")
async def list_adventures():
    """List preset and imported adventures."""
    return storage.list_adventures()


@router.post("/adventures")
async def import_adventure(body: dict[str, Any]):
    """Validate and store an adventure definition (upsert by id)."""
    return storage.save_adventure(body)


@router.get("/adventures/{adventure_id}")
async def get_adventure(adventure_id: str):
    """Get a full adventure definition."""
    adventure = storage.get_adventure(adventure_id)
    if not adventure:
        raise HTTPException(404, "Adventure not found")
    return adventure


@router.delete("/adventures/{adventure_id}")
async def delete_adventure(adventure_id: str):
    """Delete an imported adventure (presets cannot be deleted)."""
    if not storage.delete_adventure(adventure_id):
        raise HTTPException(404, "Adventure not found")
    return {"ok": True}


@router.get("/adventures/{adventure_id}/stats")
async def adventure_stats(adventure_id: str):
    """Scene, puzzle, hint, decision, ending and achievement counts."""
    catalog = storage.get_catalog(adventure_id)
    if catalog is None:
        raise HTTPException(404, "Adventure not found")
    return catalog.stats()


@router.get("/adventures/{adventure_id}/leaderboard")
async def leaderboard(adventure_id: str) -> list[LeaderboardEntry]:
    """Best finished sessions for an adventure."""
    if storage.get_adventure(adventure_id) is None:
        raise HTTPException(404, "Adventure not found")
    limit = storage.get_config()["leaderboard_size"]
    return [
        LeaderboardEntry(
            session_id=r["session_id"],
            players=r["players"],
            ending_id=r["ending"]["id"],
            total=r["score"]["total"],
            finished_at=r["finished_at"],
        )
        for r in storage.list_results(adventure_id, limit=limit)
    ]
