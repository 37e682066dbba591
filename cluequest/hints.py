"""Hint ladder: escalating hints tied to the attempt count.

Ladder (attempts made on the puzzle → level):
  0   nothing unlocked yet
  1   subtle
  2   obvious
  3+  direct   (saturates; attempt 99 gives the same hint as attempt 3)

A missing hint at the computed level is a normal None result.

Granting a hint:
  - solved puzzles get no hints (puzzle_already_completed)
  - the cooldown of the last hint granted for the puzzle must have elapsed
    since it was granted (hint_cooldown, with retry_after in seconds)
  - the hint cost is charged to the session hint-token budget
    (insufficient_hint_tokens when short)
  - re-requesting a hint already granted returns it free of charge and
    does not count as another hint used
"""

from __future__ import annotations

import logging

from cluequest.actions import HintResult
from cluequest.catalog import AdventureCatalog
from cluequest.errors import InvalidStateError
from cluequest.models import Hint, HintLevel, SessionProgress

logger = logging.getLogger(__name__)

LADDER: tuple[HintLevel, ...] = ("subtle", "obvious", "direct")


def hint_level(attempt_number: int) -> HintLevel | None:
    """Map an attempt count to a ladder level, or None before any attempt."""
    if attempt_number < 1:
        return None
    return LADDER[min(attempt_number, len(LADDER)) - 1]


def get_hint(catalog: AdventureCatalog, puzzle_id: str, attempt_number: int) -> Hint | None:
    level = hint_level(attempt_number)
    if level is None:
        return None
    return catalog.hints_for(puzzle_id).get(level)


def grant_hint(
    catalog: AdventureCatalog,
    progress: SessionProgress,
    puzzle_id: str,
    now: float,
) -> HintResult:
    """Hand out the hint unlocked by the puzzle's attempt count."""
    catalog.puzzle(puzzle_id)
    state = progress.puzzles[puzzle_id]
    if state.completed:
        raise InvalidStateError(
            "puzzle_already_completed",
            f"Puzzle {puzzle_id!r} is already solved",
            puzzle_id=puzzle_id,
        )

    if state.last_hint_at is not None:
        ready_at = state.last_hint_at + state.last_hint_cooldown
        if now < ready_at:
            raise InvalidStateError(
                "hint_cooldown",
                f"Next hint for {puzzle_id!r} is available in {ready_at - now:.0f}s",
                puzzle_id=puzzle_id,
                retry_after=ready_at - now,
            )

    hint = get_hint(catalog, puzzle_id, state.attempts)
    if hint is None:
        return HintResult(puzzle_id=puzzle_id, hint=None, tokens_left=progress.hint_tokens)

    if hint.id in state.granted_hints:
        state.last_hint_at = now
        return HintResult(
            puzzle_id=puzzle_id, hint=hint, tokens_left=progress.hint_tokens, repeated=True
        )

    if hint.cost > progress.hint_tokens:
        raise InvalidStateError(
            "insufficient_hint_tokens",
            f"Hint costs {hint.cost} tokens, {progress.hint_tokens} left",
            puzzle_id=puzzle_id,
            cost=hint.cost,
            tokens_left=progress.hint_tokens,
        )

    progress.hint_tokens -= hint.cost
    state.hints_used += 1
    state.granted_hints.append(hint.id)
    state.last_hint_at = now
    state.last_hint_cooldown = hint.cooldown
    logger.debug(
        "hint granted session=%s puzzle=%s level=%s cost=%d tokens_left=%d",
        progress.session_id, puzzle_id, hint.level, hint.cost, progress.hint_tokens,
    )
    return HintResult(
        puzzle_id=puzzle_id, hint=hint, charged=hint.cost, tokens_left=progress.hint_tokens
    )
