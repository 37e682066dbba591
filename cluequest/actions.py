"""Player actions and the result objects returned for them.

Actions are a tagged union discriminated by ``kind`` so a payload is
validated once at the boundary (HTTP body, MCP tool call) and the engine
never sees a malformed action.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from cluequest.models import DecisionRecord, Ending, Hint, SceneStatus


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class SubmitAnswer(BaseModel):
    kind: Literal["submit_answer"] = "submit_answer"
    puzzle_id: str = Field(min_length=1)
    text: str = Field(max_length=500)


class RequestHint(BaseModel):
    kind: Literal["request_hint"] = "request_hint"
    puzzle_id: str = Field(min_length=1)


class SubmitDecision(BaseModel):
    kind: Literal["submit_decision"] = "submit_decision"
    decision_id: str = Field(min_length=1)
    option_id: str = Field(min_length=1)
    player_id: str = Field(min_length=1)


class EndSession(BaseModel):
    kind: Literal["end_session"] = "end_session"


Action = Annotated[
    Union[SubmitAnswer, RequestHint, SubmitDecision, EndSession],
    Field(discriminator="kind"),
]

action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(payload: dict) -> Action:
    """Validate a raw payload into one of the action types.

    Raises pydantic.ValidationError for unknown kinds or bad fields.
    """
    return action_adapter.validate_python(payload)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    puzzle_id: str
    accepted: bool
    partial_score: float  # fraction of the puzzle's points awarded: 1.0 or 0.0
    similarity: float
    points: int
    message: str
    attempts: int
    already_completed: bool = False
    unlocked_scenes: list[str] = Field(default_factory=list)


class HintResult(BaseModel):
    puzzle_id: str
    hint: Hint | None
    charged: int = 0
    tokens_left: int
    repeated: bool = False


class DecisionOutcome(BaseModel):
    decision_id: str
    resolved: bool
    option_id: str | None = None
    consensus_reached: bool | None = None
    fallback: bool = False
    pending_players: list[str] = Field(default_factory=list)
    consequences: list[str] = Field(default_factory=list)
    unlocks_endings: list[str] = Field(default_factory=list)
    blocks_endings: list[str] = Field(default_factory=list)
    unlocked_scenes: list[str] = Field(default_factory=list)


class UnlockStatus(BaseModel):
    scene_id: str
    unlocked: bool
    status: SceneStatus
    missing_scenes: list[str] = Field(default_factory=list)
    missing_puzzles: list[str] = Field(default_factory=list)
    missing_decisions: list[str] = Field(default_factory=list)


class NarrativePayload(BaseModel):
    ending_id: str
    title: str
    text: str
    consequences: list[str] = Field(default_factory=list)
    consensus_reached: bool = True
    fallback_decisions: list[str] = Field(default_factory=list)


class EndingResolution(BaseModel):
    ending: Ending
    candidates: list[str] = Field(default_factory=list)
    ambiguous: bool = False
    default_used: bool = False


class ScoreBreakdown(BaseModel):
    base: int
    hint_bonus: int
    time_bonus: int
    ending_bonus: int
    bonus: int
    total: int
    hints_used: int
    elapsed_minutes: float


class SessionOutcome(BaseModel):
    session_id: str
    adventure_id: str
    players: list[str]
    ending: Ending
    narrative: NarrativePayload
    score: ScoreBreakdown
    achievements: list[str] = Field(default_factory=list)
    decisions: list[DecisionRecord] = Field(default_factory=list)
