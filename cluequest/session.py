"""One playthrough of an adventure.

A Session owns the only mutable record (SessionProgress) and is the single
entry point for player actions. Every mutation runs under the session's
lock, so at most one action per session is in flight and teammates
submitting at the same time cannot lose attempt counts or score. Sessions
share nothing but the read-only catalog.

Elapsed time is a monotonic counter updated from the injected clock on
every action; hint cooldowns compare stored grant timestamps with the same
clock instead of running timers.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from cluequest.actions import (
    Action,
    DecisionOutcome,
    EndSession,
    HintResult,
    RequestHint,
    SessionOutcome,
    SubmitAnswer,
    SubmitDecision,
    UnlockStatus,
    ValidationResult,
)
from cluequest.catalog import AdventureCatalog
from cluequest.endings import record_vote, resolve_ending, settle_pending
from cluequest.errors import InvalidStateError
from cluequest.hints import grant_hint
from cluequest.models import PuzzleProgress, SessionProgress
from cluequest.narrative import narrative_payload
from cluequest.scoring import compute_score, earned_achievements
from cluequest.unlock import (
    enter_scene,
    fail_scene,
    initial_statuses,
    refresh_scenes,
    require_playable,
    unlock_status,
)
from cluequest.validator import validate_answer

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_HINT_TOKENS = 100


class Session:
    def __init__(
        self,
        catalog: AdventureCatalog,
        progress: SessionProgress,
        clock: Clock = time.time,
    ) -> None:
        if progress.adventure_id != catalog.id:
            raise ValueError(
                f"Progress belongs to {progress.adventure_id!r}, not {catalog.id!r}"
            )
        self.catalog = catalog
        self.progress = progress
        self.lock = threading.RLock()
        self._clock = clock

    @classmethod
    def start(
        cls,
        catalog: AdventureCatalog,
        session_id: str,
        players: list[str],
        hint_tokens: int = DEFAULT_HINT_TOKENS,
        clock: Clock = time.time,
    ) -> "Session":
        """Create fresh progress for a team and open the first scenes."""
        team = list(dict.fromkeys(p.strip() for p in players if p.strip()))
        if not team:
            raise ValueError("A session needs at least one player")
        if len(team) > catalog.adventure.max_players:
            raise InvalidStateError(
                "team_too_large",
                f"{catalog.adventure.title} allows at most "
                f"{catalog.adventure.max_players} players",
                max_players=catalog.adventure.max_players,
            )
        progress = SessionProgress(
            session_id=session_id,
            adventure_id=catalog.id,
            players=team,
            scenes=initial_statuses(catalog),
            puzzles={p.id: PuzzleProgress() for p in catalog.adventure.puzzles},
            started_at=clock(),
            hint_tokens=hint_tokens,
        )
        refresh_scenes(catalog, progress)
        logger.info(
            "session started id=%s adventure=%s players=%d",
            session_id, catalog.id, len(team),
        )
        return cls(catalog, progress, clock)

    @classmethod
    def restore(
        cls,
        catalog: AdventureCatalog,
        progress: SessionProgress,
        clock: Clock = time.time,
    ) -> "Session":
        """Resume saved progress, filling in puzzles and scenes added since."""
        added = [p.id for p in catalog.adventure.puzzles if p.id not in progress.puzzles]
        for puzzle_id in added:
            progress.puzzles[puzzle_id] = PuzzleProgress()
        new_scenes = [sid for sid in catalog.scene_order if sid not in progress.scenes]
        for scene_id in new_scenes:
            progress.scenes[scene_id] = "locked"
        if added or new_scenes:
            logger.info(
                "session reconciled id=%s new_puzzles=%s new_scenes=%s",
                progress.session_id, added, new_scenes,
            )
        if not progress.ended:
            refresh_scenes(catalog, progress)
        return cls(catalog, progress, clock)

    @property
    def id(self) -> str:
        return self.progress.session_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self) -> float:
        """Reject actions on an ended session and advance the elapsed counter."""
        if self.progress.ended:
            raise InvalidStateError(
                "session_ended", f"Session {self.id!r} has ended", session_id=self.id
            )
        now = self._clock()
        self.progress.elapsed_seconds = max(
            self.progress.elapsed_seconds, now - self.progress.started_at
        )
        return now

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def submit_answer(self, puzzle_id: str, text: str) -> ValidationResult:
        with self.lock:
            self._begin()
            puzzle = self.catalog.puzzle(puzzle_id)
            if not self.progress.puzzles[puzzle_id].completed:
                enter_scene(self.catalog, self.progress, puzzle.scene_id)
            result = validate_answer(self.catalog, self.progress, puzzle_id, text)
            if result.accepted and not result.already_completed:
                result.unlocked_scenes = refresh_scenes(self.catalog, self.progress)
            return result

    def request_hint(self, puzzle_id: str) -> HintResult:
        with self.lock:
            now = self._begin()
            return grant_hint(self.catalog, self.progress, puzzle_id, now)

    def submit_decision(self, decision_id: str, option_id: str, player_id: str) -> DecisionOutcome:
        with self.lock:
            self._begin()
            decision = self.catalog.decision(decision_id)
            self.catalog.option(decision_id, option_id)
            require_playable(self.catalog, self.progress, decision.scene_id)
            outcome = record_vote(self.catalog, self.progress, decision_id, option_id, player_id)
            enter_scene(self.catalog, self.progress, decision.scene_id)
            if outcome.resolved:
                outcome.unlocked_scenes = refresh_scenes(self.catalog, self.progress)
            return outcome

    def fail_scene(self, scene_id: str) -> None:
        """Mark an in-progress scene failed (host-defined failure condition)."""
        with self.lock:
            self._begin()
            fail_scene(self.catalog, self.progress, scene_id)
            logger.info("scene failed session=%s scene=%s", self.id, scene_id)

    def end(self) -> SessionOutcome:
        """Settle pending votes, resolve the ending and compute the final score."""
        with self.lock:
            self._begin()
            settle_pending(self.catalog, self.progress)
            resolution = resolve_ending(
                self.catalog,
                self.progress.decisions,
                self.progress.completed_count,
                self.progress.consensus_flags(),
                self.progress.elapsed_minutes,
            )
            ending = resolution.ending
            score = compute_score(self.progress, ending, self.catalog.adventure.duration_minutes)
            outcome = SessionOutcome(
                session_id=self.id,
                adventure_id=self.catalog.id,
                players=list(self.progress.players),
                ending=ending,
                narrative=narrative_payload(self.catalog, self.progress, ending),
                score=score,
                achievements=earned_achievements(self.catalog, self.progress, ending),
                decisions=list(self.progress.decisions),
            )
            self.progress.ended = True
            logger.info(
                "session ended id=%s ending=%s total=%d",
                self.id, ending.id, score.total,
            )
            return outcome

    def apply(self, action: Action):
        """Dispatch a validated action to the matching operation."""
        if isinstance(action, SubmitAnswer):
            return self.submit_answer(action.puzzle_id, action.text)
        if isinstance(action, RequestHint):
            return self.request_hint(action.puzzle_id)
        if isinstance(action, SubmitDecision):
            return self.submit_decision(action.decision_id, action.option_id, action.player_id)
        if isinstance(action, EndSession):
            return self.end()
        raise TypeError(f"Unsupported action: {action!r}")

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def unlock_status(self, scene_id: str) -> UnlockStatus:
        with self.lock:
            return unlock_status(self.catalog, scene_id, self.progress)

    def snapshot(self) -> dict:
        with self.lock:
            return self.progress.model_dump()
