"""Tests for cluequest.hints: ladder levels, cooldowns, token budget."""

import pytest

from cluequest import InvalidStateError, NotFoundError
from cluequest.hints import get_hint, grant_hint, hint_level
from cluequest.models import PuzzleProgress, SessionProgress


@pytest.fixture
def progress(catalog) -> SessionProgress:
    return SessionProgress(
        session_id="s1",
        adventure_id=catalog.id,
        players=["ana"],
        scenes={sid: "available" for sid in catalog.scene_order},
        puzzles={p.id: PuzzleProgress() for p in catalog.adventure.puzzles},
        started_at=0,
        hint_tokens=100,
    )


# ── Ladder ───────────────────────────────────────────────


@pytest.mark.parametrize("attempts, level", [
    (0, None), (1, "subtle"), (2, "obvious"), (3, "direct"), (4, "direct"), (99, "direct"),
])
def test_hint_level(attempts, level):
    assert hint_level(attempts) == level


def test_get_hint_by_attempts(catalog):
    assert get_hint(catalog, "door-code", 0) is None
    assert get_hint(catalog, "door-code", 1).id == "dc-1"
    assert get_hint(catalog, "door-code", 2).id == "dc-2"
    assert get_hint(catalog, "door-code", 3).id == "dc-3"
    assert get_hint(catalog, "door-code", 99).id == "dc-3"


def test_missing_hint_is_none(catalog):
    assert get_hint(catalog, "safe", 2) is None


def test_get_hint_unknown_puzzle(catalog):
    with pytest.raises(NotFoundError):
        get_hint(catalog, "ghost", 1)


# ── Granting ─────────────────────────────────────────────


def test_no_hint_before_first_attempt(catalog, progress):
    result = grant_hint(catalog, progress, "door-code", now=0)
    assert result.hint is None
    assert progress.puzzles["door-code"].hints_used == 0


def test_free_subtle_hint(catalog, progress):
    progress.puzzles["door-code"].attempts = 1
    result = grant_hint(catalog, progress, "door-code", now=10)
    assert result.hint.id == "dc-1"
    assert result.charged == 0
    assert result.tokens_left == 100
    assert progress.puzzles["door-code"].hints_used == 1


def test_cost_is_charged(catalog, progress):
    progress.puzzles["door-code"].attempts = 2
    result = grant_hint(catalog, progress, "door-code", now=10)
    assert result.hint.id == "dc-2"
    assert result.charged == 10
    assert progress.hint_tokens == 90


def test_cooldown_blocks_next_hint(catalog, progress):
    state = progress.puzzles["door-code"]
    state.attempts = 2
    grant_hint(catalog, progress, "door-code", now=100)
    state.attempts = 3
    with pytest.raises(InvalidStateError) as exc:
        grant_hint(catalog, progress, "door-code", now=130)
    assert exc.value.reason == "hint_cooldown"
    assert exc.value.details["retry_after"] == pytest.approx(30)
    result = grant_hint(catalog, progress, "door-code", now=160)
    assert result.hint.id == "dc-3"
    assert progress.hint_tokens == 100 - 10 - 25


def test_repeat_request_is_free(catalog, progress):
    state = progress.puzzles["door-code"]
    state.attempts = 1
    grant_hint(catalog, progress, "door-code", now=0)
    again = grant_hint(catalog, progress, "door-code", now=5)
    assert again.repeated
    assert again.charged == 0
    assert state.hints_used == 1
    assert state.last_hint_at == 5


def test_repeat_request_waits_out_cooldown(catalog, progress):
    state = progress.puzzles["door-code"]
    state.attempts = 2
    grant_hint(catalog, progress, "door-code", now=100)
    with pytest.raises(InvalidStateError) as exc:
        grant_hint(catalog, progress, "door-code", now=105)
    assert exc.value.reason == "hint_cooldown"
    assert exc.value.details["retry_after"] == pytest.approx(55)
    again = grant_hint(catalog, progress, "door-code", now=160)
    assert again.repeated
    assert progress.hint_tokens == 90
    assert state.last_hint_at == 160


def test_insufficient_tokens(catalog, progress):
    progress.hint_tokens = 20
    progress.puzzles["door-code"].attempts = 3
    with pytest.raises(InvalidStateError) as exc:
        grant_hint(catalog, progress, "door-code", now=0)
    assert exc.value.reason == "insufficient_hint_tokens"
    assert exc.value.details["cost"] == 25
    assert progress.hint_tokens == 20
    assert progress.puzzles["door-code"].hints_used == 0


def test_no_hints_for_solved_puzzle(catalog, progress):
    progress.puzzles["door-code"].attempts = 1
    progress.puzzles["door-code"].completed = True
    with pytest.raises(InvalidStateError) as exc:
        grant_hint(catalog, progress, "door-code", now=0)
    assert exc.value.reason == "puzzle_already_completed"
