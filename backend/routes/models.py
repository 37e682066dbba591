"""Pydantic request/response models for API endpoints.

Action bodies (answer, hint, decision) reuse cluequest.actions directly;
ActionBody wraps the tagged union for the generic actions endpoint.
"""

from typing import Annotated

from pydantic import BaseModel, Field, RootModel, StringConstraints

from cluequest.actions import Action


PlayerName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class StartSessionBody(BaseModel):
    adventure_id: str
    players: list[PlayerName] = Field(default_factory=lambda: ["player-1"], min_length=1)


class UpdateSettings(BaseModel):
    hint_token_budget: int | None = Field(default=None, ge=0)
    persist_sessions: bool | None = None
    leaderboard_size: int | None = Field(default=None, ge=1)


class LeaderboardEntry(BaseModel):
    session_id: str
    players: list[str]
    ending_id: str
    total: int
    finished_at: str


class ActionBody(RootModel[Action]):
    """Any player action, tagged by its "kind" field."""
