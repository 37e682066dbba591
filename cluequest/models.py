"""Core domain models.

Adventure definitions (puzzles, scenes, hints, decisions, endings) are
immutable once loaded. ``SessionProgress`` is the only mutable record; the
engine modules mutate it in place and the host service snapshots it.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

MatchMode = Literal["exact", "fuzzy"]

HintLevel = Literal["subtle", "obvious", "direct"]

SceneStatus = Literal["locked", "available", "in_progress", "completed", "failed"]

Coordination = Literal["single", "voting", "consensus"]

EndingType = Literal["success", "partial_success", "failure", "tragedy", "neutral"]


class _Definition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Adventure definitions
# ---------------------------------------------------------------------------

class Puzzle(_Definition):
    """A free-text puzzle owned by one scene."""

    id: str
    scene_id: str
    answers: list[str] = Field(min_length=1)
    alternative_answers: list[str] = Field(default_factory=list)
    match: MatchMode = "exact"
    case_sensitive: bool = False
    allow_partial_credit: bool = False
    partial_credit_threshold: float = Field(default=0.0, ge=0.0, lt=1.0)
    points: int = Field(default=100, ge=0)

    @property
    def accepted_answers(self) -> list[str]:
        return [*self.answers, *self.alternative_answers]


class UnlockCondition(_Definition):
    required_scenes: list[str] = Field(default_factory=list)
    required_puzzles: list[str] = Field(default_factory=list)
    required_decisions: list[str] = Field(default_factory=list)


class Scene(_Definition):
    id: str
    order: int
    title: str = ""
    puzzles: list[str] = Field(default_factory=list)
    unlock: UnlockCondition | None = None


class Hint(_Definition):
    id: str
    puzzle_id: str
    level: HintLevel
    text: str
    cost: int = Field(default=0, ge=0)
    cooldown: float = Field(default=0, ge=0)  # seconds


class DecisionOption(_Definition):
    id: str
    text: str
    description: str = ""
    consequences: list[str] = Field(default_factory=list)
    unlocks_endings: list[str] = Field(default_factory=list)
    blocks_endings: list[str] = Field(default_factory=list)


class Decision(_Definition):
    id: str
    scene_id: str
    question: str
    coordination: Coordination = "single"
    options: list[DecisionOption] = Field(min_length=1)


class DecisionRequirement(_Definition):
    type: Literal["decision"] = "decision"
    decision_id: str
    option_id: str


class PuzzleCountRequirement(_Definition):
    type: Literal["puzzle_count"] = "puzzle_count"
    at_least: int = Field(ge=0)


class ConsensusRequirement(_Definition):
    type: Literal["consensus"] = "consensus"
    decision_id: str
    reached: bool = True


class TimeLimitRequirement(_Definition):
    type: Literal["time_limit"] = "time_limit"
    max_minutes: float = Field(gt=0)


EndingRequirement = Annotated[
    Union[
        DecisionRequirement,
        PuzzleCountRequirement,
        ConsensusRequirement,
        TimeLimitRequirement,
    ],
    Field(discriminator="type"),
]


class Ending(_Definition):
    id: str
    title: str
    type: EndingType = "neutral"
    description: str = ""
    requirements: list[EndingRequirement] = Field(default_factory=list)
    narrative: str = ""  # Handlebars template
    consequences: list[str] = Field(default_factory=list)
    score: int = 0  # reward added to the final score
    priority: int = 0  # higher is tried first
    unlockable_content: list[str] = Field(default_factory=list)


class Achievement(_Definition):
    id: str
    name: str
    description: str = ""
    rarity: str = "common"
    requires_no_hints: bool = False


class Adventure(_Definition):
    """A complete adventure definition as stored on disk."""

    id: str
    title: str
    description: str = ""
    duration_minutes: float = Field(default=60, gt=0)
    min_players: int = Field(default=1, ge=1)
    max_players: int = Field(default=8, ge=1)
    scenes: list[Scene] = Field(min_length=1)
    puzzles: list[Puzzle] = Field(default_factory=list)
    hints: list[Hint] = Field(default_factory=list)
    decisions: list[Decision] = Field(default_factory=list)
    endings: list[Ending] = Field(min_length=1)
    default_ending_id: str
    achievements: list[Achievement] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Session progress (mutable)
# ---------------------------------------------------------------------------

class PuzzleProgress(BaseModel):
    attempts: int = 0
    hints_used: int = 0
    completed: bool = False
    granted_hints: list[str] = Field(default_factory=list)
    last_hint_at: float | None = None
    last_hint_cooldown: float = 0


class Vote(BaseModel):
    player_id: str
    option_id: str


class Choice(BaseModel):
    decision_id: str
    option_id: str


class DecisionRecord(Choice):
    """A resolved decision.

    ``consensus_reached`` is False when the team did not vote unanimously.
    ``fallback`` is True when a majority vote settled a consensus decision,
    or when votes still pending at session end were settled.
    """

    coordination: Coordination = "single"
    consensus_reached: bool = True
    fallback: bool = False
    votes: list[Vote] = Field(default_factory=list)


class SessionProgress(BaseModel):
    session_id: str
    adventure_id: str
    players: list[str] = Field(min_length=1)
    scenes: dict[str, SceneStatus]
    puzzles: dict[str, PuzzleProgress]
    decisions: list[DecisionRecord] = Field(default_factory=list)
    pending_votes: dict[str, list[Vote]] = Field(default_factory=dict)
    started_at: float
    elapsed_seconds: float = 0
    score: int = 0
    hint_tokens: int = 0
    ended: bool = False

    @property
    def completed_puzzles(self) -> set[str]:
        return {pid for pid, p in self.puzzles.items() if p.completed}

    @property
    def completed_count(self) -> int:
        return sum(1 for p in self.puzzles.values() if p.completed)

    @property
    def hints_used(self) -> int:
        return sum(p.hints_used for p in self.puzzles.values())

    @property
    def elapsed_minutes(self) -> float:
        return self.elapsed_seconds / 60

    def choices(self) -> dict[str, str]:
        """decision id → chosen option id, for resolved decisions."""
        return {d.decision_id: d.option_id for d in self.decisions}

    def consensus_flags(self) -> dict[str, bool]:
        return {d.decision_id: d.consensus_reached for d in self.decisions}

    def decision_made(self, decision_id: str) -> bool:
        return any(d.decision_id == decision_id for d in self.decisions)
