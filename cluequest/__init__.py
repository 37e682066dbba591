"""Quest progression engine for scripted escape-room adventures.

Build an AdventureCatalog from an adventure definition, start a Session per
team, and feed it actions (submit_answer, request_hint, submit_decision,
end). The engine does no I/O; the host service owns storage.
"""

from cluequest.catalog import AdventureCatalog  # noqa: F401
from cluequest.errors import (  # noqa: F401
    AdventureConfigError,
    InvalidStateError,
    NotFoundError,
    QuestError,
)
from cluequest.session import Session  # noqa: F401
