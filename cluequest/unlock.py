"""Scene unlock gate and scene status transitions.

Status machine:
  locked → available → in_progress → completed
                          └────────→ failed   (host application only)

A scene with no unlock condition is always unlocked. Otherwise it unlocks
once every required scene is completed, every required puzzle is solved
and every required decision is resolved.

A scene is done once all its puzzles are solved and all decisions that
belong to it are resolved. refresh_scenes() is run after every mutation:
it completes done scenes and promotes newly unlocked ones until nothing
changes, so unlocking is monotonic and never cached.
"""

from __future__ import annotations

import logging

from cluequest.actions import UnlockStatus
from cluequest.catalog import AdventureCatalog
from cluequest.errors import InvalidStateError
from cluequest.models import SessionProgress

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("available", "in_progress")


def unlock_status(
    catalog: AdventureCatalog, scene_id: str, progress: SessionProgress
) -> UnlockStatus:
    """Report whether a scene is unlocked and what is still missing. Pure."""
    scene = catalog.scene(scene_id)
    status = progress.scenes[scene_id]
    if scene.unlock is None:
        return UnlockStatus(scene_id=scene_id, unlocked=True, status=status)

    solved = progress.completed_puzzles
    missing_scenes = [
        sid for sid in scene.unlock.required_scenes if progress.scenes.get(sid) != "completed"
    ]
    missing_puzzles = [pid for pid in scene.unlock.required_puzzles if pid not in solved]
    missing_decisions = [
        did for did in scene.unlock.required_decisions if not progress.decision_made(did)
    ]
    return UnlockStatus(
        scene_id=scene_id,
        unlocked=not (missing_scenes or missing_puzzles or missing_decisions),
        status=status,
        missing_scenes=missing_scenes,
        missing_puzzles=missing_puzzles,
        missing_decisions=missing_decisions,
    )


def is_unlocked(catalog: AdventureCatalog, scene_id: str, progress: SessionProgress) -> bool:
    return unlock_status(catalog, scene_id, progress).unlocked


def scene_done(catalog: AdventureCatalog, scene_id: str, progress: SessionProgress) -> bool:
    scene = catalog.scene(scene_id)
    if any(not progress.puzzles[pid].completed for pid in scene.puzzles):
        return False
    return all(progress.decision_made(d.id) for d in catalog.decisions_in(scene_id))


def initial_statuses(catalog: AdventureCatalog) -> dict[str, str]:
    return {sid: "locked" for sid in catalog.scene_order}


def refresh_scenes(catalog: AdventureCatalog, progress: SessionProgress) -> list[str]:
    """Apply completion and unlock transitions until a fixed point.

    Returns the ids of scenes that became available, in scene order.
    """
    unlocked: list[str] = []
    changed = True
    while changed:
        changed = False
        for scene_id in catalog.scene_order:
            status = progress.scenes[scene_id]
            if status == "locked" and is_unlocked(catalog, scene_id, progress):
                progress.scenes[scene_id] = "available"
                unlocked.append(scene_id)
                changed = True
            elif status in OPEN_STATUSES and scene_done(catalog, scene_id, progress):
                progress.scenes[scene_id] = "completed"
                logger.debug("scene completed session=%s scene=%s", progress.session_id, scene_id)
                changed = True
    if unlocked:
        logger.debug("scenes unlocked session=%s scenes=%s", progress.session_id, unlocked)
    return unlocked


def require_playable(catalog: AdventureCatalog, progress: SessionProgress, scene_id: str) -> None:
    """Raise unless the scene can take player actions. Pure."""
    catalog.scene(scene_id)
    status = progress.scenes[scene_id]
    if status == "locked":
        raise InvalidStateError(
            "scene_locked", f"Scene {scene_id!r} is still locked", scene_id=scene_id
        )
    elif status == "failed":
        raise InvalidStateError(
            "scene_failed", f"Scene {scene_id!r} has failed", scene_id=scene_id
        )


def enter_scene(catalog: AdventureCatalog, progress: SessionProgress, scene_id: str) -> None:
    """Require the scene to be playable; moves available → in_progress."""
    require_playable(catalog, progress, scene_id)
    if progress.scenes[scene_id] == "available":
        progress.scenes[scene_id] = "in_progress"


def fail_scene(catalog: AdventureCatalog, progress: SessionProgress, scene_id: str) -> None:
    catalog.scene(scene_id)
    if progress.scenes[scene_id] != "in_progress":
        raise InvalidStateError(
            "scene_not_in_progress",
            f"Only a scene in progress can fail (scene {scene_id!r} is "
            f"{progress.scenes[scene_id]})",
            scene_id=scene_id,
        )
    progress.scenes[scene_id] = "failed"
