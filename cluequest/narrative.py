"""Handlebars rendering of ending narratives.

Ending narratives are authored as Handlebars templates. Available context:

  {{team}}                  players joined with ", " ({{#each players}} also works;
                            use {{{team}}} to skip HTML escaping)
  {{completed}}             solved puzzle count
  {{total_puzzles}}         puzzle count of the adventure
  {{hints_used}}            hints granted during the session
  {{elapsed_minutes}}       whole minutes played
  {{consensus_reached}}     false when any decision fell back to a majority vote
  {{#each decisions}}{{decision_id}}={{option_id}}{{/each}}

When consensus was not reached a notice is appended to the rendered text so
the UI can disclose it even if the template does not mention it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pybars

from cluequest.actions import NarrativePayload
from cluequest.catalog import AdventureCatalog
from cluequest.models import Ending, SessionProgress

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}

CONSENSUS_NOTICE = (
    "The team did not reach consensus on every decision; "
    "a majority vote settled: {decisions}."
)


class NarrativeError(Exception):
    """Raised when a narrative template fails to compile or render."""


def _helper_plural(this, count, singular, plural=None):
    """{{plural completed "puzzle"}} → "1 puzzle" / "3 puzzles"."""
    word = singular if int(count) == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


_HELPERS: dict[str, Callable] = {
    "plural": _helper_plural,
}


def render_narrative(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template. Templates are cached by source."""
    if not template_str:
        return ""
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise NarrativeError(f"Narrative template error: {e}") from e


def build_narrative_context(catalog: AdventureCatalog, progress: SessionProgress) -> dict[str, Any]:
    return {
        "title": catalog.adventure.title,
        "team": ", ".join(progress.players),
        "players": list(progress.players),
        "completed": progress.completed_count,
        "total_puzzles": len(catalog.adventure.puzzles),
        "hints_used": progress.hints_used,
        "elapsed_minutes": int(progress.elapsed_minutes),
        "consensus_reached": not any(d.fallback for d in progress.decisions),
        "decisions": [
            {"decision_id": d.decision_id, "option_id": d.option_id} for d in progress.decisions
        ],
    }


def narrative_payload(
    catalog: AdventureCatalog, progress: SessionProgress, ending: Ending
) -> NarrativePayload:
    fallback = [d.decision_id for d in progress.decisions if d.fallback]
    text = render_narrative(ending.narrative, build_narrative_context(catalog, progress))
    if fallback:
        notice = CONSENSUS_NOTICE.format(decisions=", ".join(fallback))
        text = f"{text}\n\n{notice}" if text else notice
    return NarrativePayload(
        ending_id=ending.id,
        title=ending.title,
        text=text,
        consequences=ending.consequences,
        consensus_reached=not fallback,
        fallback_decisions=fallback,
    )
