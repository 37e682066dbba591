"""Final score and achievements.

  base          completed puzzles × 100
  hint bonus    0 hints → +500, 1–3 hints → +200, more → 0
  time bonus    elapsed ≤ target → +300, ≤ 1.2 × target → +100, else 0
  ending bonus  the resolved ending's reward, always added
  total         base + hint bonus + time bonus + ending bonus

Elapsed time and target are both compared in minutes.
"""

from __future__ import annotations

from cluequest.actions import ScoreBreakdown
from cluequest.catalog import AdventureCatalog
from cluequest.models import Ending, SessionProgress

POINTS_PER_PUZZLE = 100

NO_HINT_BONUS = 500
FEW_HINTS_BONUS = 200
FEW_HINTS_MAX = 3

ON_TIME_BONUS = 300
NEAR_TIME_BONUS = 100
NEAR_TIME_FACTOR = 1.2


def hint_bonus(hints_used: int) -> int:
    if hints_used == 0:
        return NO_HINT_BONUS
    if hints_used <= FEW_HINTS_MAX:
        return FEW_HINTS_BONUS
    return 0


def time_bonus(elapsed_minutes: float, target_minutes: float) -> int:
    if elapsed_minutes <= target_minutes:
        return ON_TIME_BONUS
    if elapsed_minutes <= target_minutes * NEAR_TIME_FACTOR:
        return NEAR_TIME_BONUS
    return 0


def compute_score(
    progress: SessionProgress, ending: Ending, target_minutes: float
) -> ScoreBreakdown:
    base = progress.completed_count * POINTS_PER_PUZZLE
    hints = hint_bonus(progress.hints_used)
    timing = time_bonus(progress.elapsed_minutes, target_minutes)
    bonus = hints + timing + ending.score
    return ScoreBreakdown(
        base=base,
        hint_bonus=hints,
        time_bonus=timing,
        ending_bonus=ending.score,
        bonus=bonus,
        total=base + bonus,
        hints_used=progress.hints_used,
        elapsed_minutes=progress.elapsed_minutes,
    )


def earned_achievements(
    catalog: AdventureCatalog, progress: SessionProgress, ending: Ending
) -> list[str]:
    """Achievements unlocked by the ending, honouring requires_no_hints."""
    earned = []
    for achievement_id in ending.unlockable_content:
        achievement = catalog.achievement(achievement_id)
        if achievement.requires_no_hints and progress.hints_used:
            continue
        earned.append(achievement_id)
    return earned
