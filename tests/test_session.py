"""Tests for cluequest.session: the per-team playthrough."""

import threading

import pytest

from cluequest import InvalidStateError, NotFoundError, Session
from cluequest.actions import EndSession, RequestHint, SubmitAnswer, SubmitDecision


@pytest.fixture
def session(catalog, clock) -> Session:
    return Session.start(catalog, "s1", ["ana", "ben"], hint_tokens=50, clock=clock)


def _solve_all(session):
    session.submit_answer("door-code", "1234")
    session.submit_answer("safe", "golden key")
    session.submit_answer("riddle", "midnight meeting")


# ── Start ────────────────────────────────────────────────


def test_start(session):
    progress = session.progress
    assert progress.players == ["ana", "ben"]
    assert progress.scenes == {"lobby": "available", "vault": "locked", "escape": "locked"}
    assert progress.hint_tokens == 50
    assert progress.started_at == 1_000.0
    assert set(progress.puzzles) == {"door-code", "safe", "riddle"}


def test_start_dedupes_players(catalog, clock):
    session = Session.start(catalog, "s1", [" ana", "ana", "ben ", ""], clock=clock)
    assert session.progress.players == ["ana", "ben"]


def test_start_needs_players(catalog, clock):
    with pytest.raises(ValueError):
        Session.start(catalog, "s1", ["  "], clock=clock)


def test_start_rejects_large_team(catalog, clock):
    with pytest.raises(InvalidStateError) as exc:
        Session.start(catalog, "s1", ["a", "b", "c", "d", "e"], clock=clock)
    assert exc.value.reason == "team_too_large"


def test_progress_must_match_catalog(session, adventure_data):
    from cluequest import AdventureCatalog

    adventure_data["id"] = "other"
    other = AdventureCatalog.from_dict(adventure_data)
    with pytest.raises(ValueError):
        Session(other, session.progress)


# ── Answers ──────────────────────────────────────────────


def test_answer_enters_scene(session):
    result = session.submit_answer("door-code", "9999")
    assert not result.accepted
    assert session.progress.scenes["lobby"] == "in_progress"


def test_answer_unlocks_next_scene(session):
    result = session.submit_answer("door-code", "1234")
    assert result.accepted
    assert result.unlocked_scenes == ["vault"]
    assert session.progress.scenes["lobby"] == "completed"


def test_answer_for_locked_scene_rejected(session):
    with pytest.raises(InvalidStateError) as exc:
        session.submit_answer("safe", "golden key")
    assert exc.value.reason == "scene_locked"
    assert session.progress.puzzles["safe"].attempts == 0


def test_answer_for_solved_puzzle_is_idempotent(session):
    session.submit_answer("door-code", "1234")
    again = session.submit_answer("door-code", "1234")
    assert again.already_completed
    assert session.progress.score == 100


def test_unknown_puzzle(session):
    with pytest.raises(NotFoundError):
        session.submit_answer("ghost", "x")


def test_elapsed_time_tracks_clock(session, clock):
    clock.advance(90)
    session.submit_answer("door-code", "0000")
    assert session.progress.elapsed_seconds == 90


# ── Hints ────────────────────────────────────────────────


def test_hint_flow(session, clock):
    assert session.request_hint("door-code").hint is None
    session.submit_answer("door-code", "0000")
    assert session.request_hint("door-code").hint.level == "subtle"
    session.submit_answer("door-code", "0001")
    result = session.request_hint("door-code")
    assert result.hint.level == "obvious"
    assert result.tokens_left == 40
    session.submit_answer("door-code", "0002")
    with pytest.raises(InvalidStateError) as exc:
        session.request_hint("door-code")
    assert exc.value.reason == "hint_cooldown"
    clock.advance(60)
    assert session.request_hint("door-code").hint.level == "direct"
    assert session.progress.hints_used == 3


# ── Decisions ────────────────────────────────────────────


def test_decision_in_locked_scene_rejected(session):
    with pytest.raises(InvalidStateError) as exc:
        session.submit_decision("loot", "take", "ana")
    assert exc.value.reason == "scene_locked"


def test_decision_unlocks_escape(session):
    _solve_all(session)
    session.submit_decision("loot", "take", "ana")
    outcome = session.submit_decision("loot", "take", "ben")
    assert outcome.resolved
    assert outcome.unlocked_scenes == ["escape"]
    assert set(session.progress.scenes.values()) == {"completed"}


def test_unknown_option_rejected_before_vote(session):
    session.submit_answer("door-code", "1234")
    with pytest.raises(NotFoundError):
        session.submit_decision("loot", "burn", "ana")
    assert session.progress.pending_votes == {}


def test_rejected_vote_leaves_scene_untouched(session):
    session.submit_answer("door-code", "1234")
    with pytest.raises(NotFoundError):
        session.submit_decision("loot", "take", "zed")
    assert session.progress.scenes["vault"] == "available"
    session.submit_decision("loot", "take", "ana")
    assert session.progress.scenes["vault"] == "in_progress"


# ── Failing scenes ───────────────────────────────────────


def test_fail_scene_blocks_answers(session):
    session.submit_answer("door-code", "0000")
    session.fail_scene("lobby")
    with pytest.raises(InvalidStateError) as exc:
        session.submit_answer("door-code", "1234")
    assert exc.value.reason == "scene_failed"


# ── End ──────────────────────────────────────────────────


def test_full_run(session, clock):
    _solve_all(session)
    session.submit_decision("loot", "take", "ana")
    session.submit_decision("loot", "take", "ben")
    clock.advance(20 * 60)
    outcome = session.end()
    assert outcome.ending.id == "rich"
    assert outcome.narrative.text == "ana, ben got away with it."
    assert outcome.score.base == 300
    assert outcome.score.hint_bonus == 500
    assert outcome.score.time_bonus == 300
    assert outcome.score.ending_bonus == 500
    assert outcome.score.total == 1600
    assert outcome.achievements == ["clean-run"]
    assert session.progress.ended


def test_end_settles_pending_votes(session):
    _solve_all(session)
    session.submit_decision("loot", "take", "ana")
    outcome = session.end()
    assert outcome.decisions[0].fallback
    assert outcome.ending.id == "rich"
    assert not outcome.narrative.consensus_reached


def test_early_end_gives_default(session):
    outcome = session.end()
    assert outcome.ending.id == "caught"
    assert outcome.score.base == 0


def test_no_actions_after_end(session):
    session.end()
    with pytest.raises(InvalidStateError) as exc:
        session.submit_answer("door-code", "1234")
    assert exc.value.reason == "session_ended"
    with pytest.raises(InvalidStateError):
        session.end()


# ── Dispatch and snapshots ───────────────────────────────


def test_apply_dispatches_actions(session):
    assert session.apply(SubmitAnswer(puzzle_id="door-code", text="1234")).accepted
    assert session.apply(RequestHint(puzzle_id="safe")).hint is None
    session.apply(SubmitAnswer(puzzle_id="safe", text="golden key"))
    assert not session.apply(
        SubmitDecision(decision_id="loot", option_id="leave", player_id="ana")
    ).resolved
    assert session.apply(EndSession()).ending.id == "honest"


def test_unlock_status(session):
    status = session.unlock_status("vault")
    assert not status.unlocked
    assert status.missing_puzzles == ["door-code"]


def test_snapshot_is_plain_data(session):
    snap = session.snapshot()
    assert snap["session_id"] == "s1"
    assert snap["scenes"]["lobby"] == "available"
    snap["score"] = 999
    assert session.progress.score == 0


def test_concurrent_answers_count_every_attempt(session):
    def guess():
        for _ in range(50):
            session.submit_answer("door-code", "0000")

    threads = [threading.Thread(target=guess) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert session.progress.puzzles["door-code"].attempts == 200
