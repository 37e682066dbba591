"""Engine errors.

Every failure the engine reports to a caller is one of these. A rejected
answer is not an error: the validator returns ``accepted=False`` instead.
"""

from __future__ import annotations

from typing import Any


class QuestError(Exception):
    """Base class for all engine errors."""


class NotFoundError(QuestError, LookupError):
    """An id passed by the caller does not name a known entity."""

    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"Unknown {kind}: {ident!r}")
        self.kind = kind
        self.ident = ident


class InvalidStateError(QuestError):
    """The operation is well-formed but not allowed in the current state.

    ``reason`` is a stable machine-readable code (e.g. ``"hint_cooldown"``);
    extra keyword details are kept for the caller (e.g. ``retry_after``).
    """

    def __init__(self, reason: str, message: str, **details: Any) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason, "message": self.message, **self.details}


class AdventureConfigError(QuestError, ValueError):
    """An adventure definition failed validation. Lists every problem found."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("Invalid adventure: " + "; ".join(problems))
        self.problems = problems
