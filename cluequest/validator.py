"""Answer validation: normalization, exact and fuzzy matching, scoring.

Normalization: strip surrounding whitespace; lower-case input and accepted
answers when the puzzle is case-insensitive.

Match modes:
  exact  accepted iff the normalized input equals an accepted answer
  fuzzy  equality as above, or (allow_partial_credit only) containment in
         either direction with similarity >= partial_credit_threshold,
         where similarity = len(shorter) / len(longer)

The threshold is a gate, not a sliding scale: an accepted answer earns the
puzzle's full points, a rejected one earns nothing. Empty input never
matches. Attempts are unbounded.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from cluequest.actions import ValidationResult
from cluequest.catalog import AdventureCatalog
from cluequest.models import Puzzle, SessionProgress

logger = logging.getLogger(__name__)

MSG_CORRECT = "Correct!"
MSG_INCORRECT = "Incorrect. Try again."
MSG_CLOSE = "Close, but not quite right."
MSG_EMPTY = "Type an answer first."
MSG_SOLVED = "Already solved."


class Match(NamedTuple):
    accepted: bool
    similarity: float
    exact: bool


def normalize(text: str, case_sensitive: bool) -> str:
    text = text.strip()
    return text if case_sensitive else text.lower()


def _containment(guess: str, answer: str) -> float:
    """Similarity of two strings when one contains the other, else 0."""
    if guess in answer or answer in guess:
        shorter, longer = sorted((len(guess), len(answer)))
        return shorter / longer
    return 0.0


def match_answer(puzzle: Puzzle, raw_answer: str) -> Match:
    """Match raw input against a puzzle without touching any progress."""
    guess = normalize(raw_answer, puzzle.case_sensitive)
    if not guess:
        return Match(False, 0.0, False)
    answers = [normalize(a, puzzle.case_sensitive) for a in puzzle.accepted_answers]

    if guess in answers:
        return Match(True, 1.0, True)
    if puzzle.match == "exact" or not puzzle.allow_partial_credit:
        return Match(False, 0.0, False)

    best = max((_containment(guess, a) for a in answers if a), default=0.0)
    accepted = best > 0 and best >= puzzle.partial_credit_threshold
    return Match(accepted, best, False)


def validate_answer(
    catalog: AdventureCatalog,
    progress: SessionProgress,
    puzzle_id: str,
    raw_answer: str,
) -> ValidationResult:
    """Validate an answer and record the attempt.

    Counts the attempt, and on acceptance marks the puzzle completed and adds
    its points to the running score. A solved puzzle is reported as
    already_completed and never scored twice.
    """
    puzzle = catalog.puzzle(puzzle_id)
    state = progress.puzzles[puzzle_id]

    if state.completed:
        return ValidationResult(
            puzzle_id=puzzle_id,
            accepted=True,
            partial_score=0.0,
            similarity=1.0,
            points=0,
            message=MSG_SOLVED,
            attempts=state.attempts,
            already_completed=True,
        )

    state.attempts += 1
    match = match_answer(puzzle, raw_answer)
    logger.debug(
        "answer puzzle=%s attempt=%d accepted=%s similarity=%.2f",
        puzzle_id, state.attempts, match.accepted, match.similarity,
    )

    if match.accepted:
        state.completed = True
        progress.score += puzzle.points
        return ValidationResult(
            puzzle_id=puzzle_id,
            accepted=True,
            partial_score=1.0,
            similarity=match.similarity,
            points=puzzle.points,
            message=MSG_CORRECT,
            attempts=state.attempts,
        )

    if not raw_answer.strip():
        message = MSG_EMPTY
    elif puzzle.match == "fuzzy":
        message = MSG_CLOSE if match.similarity > 0 else MSG_INCORRECT
    else:
        message = MSG_INCORRECT
    return ValidationResult(
        puzzle_id=puzzle_id,
        accepted=False,
        partial_score=0.0,
        similarity=match.similarity,
        points=0,
        message=message,
        attempts=state.attempts,
    )
