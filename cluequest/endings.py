"""Team decisions and ending resolution.

Decision coordination:
  single     the first vote resolves the decision
  voting     resolves by majority once every player has voted
  consensus  resolves when every player voted the same option; otherwise
             the majority-vote fallback picks the option and the record is
             flagged (consensus_reached=False, fallback=True)

Majority ties go to the option that received its first vote earliest.
Votes still pending when the session ends are settled the same way and
flagged as fallback.

Ending resolution:
  - an ending is a candidate when every requirement holds and no chosen
    option blocks it
  - candidates are tried in catalog order (explicit priority, then more
    requirements first, then authoring order); the first one wins
  - no candidate → the adventure's default ending
  - several satisfied candidates are logged, never reported as an error
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping

from cluequest.actions import DecisionOutcome, EndingResolution
from cluequest.catalog import AdventureCatalog
from cluequest.errors import InvalidStateError, NotFoundError
from cluequest.models import (
    Choice,
    ConsensusRequirement,
    Decision,
    DecisionOption,
    DecisionRecord,
    DecisionRequirement,
    EndingRequirement,
    PuzzleCountRequirement,
    SessionProgress,
    TimeLimitRequirement,
    Vote,
)

logger = logging.getLogger(__name__)


# ── Votes ────────────────────────────────────────────────


def tally_votes(votes: list[Vote]) -> tuple[str, bool]:
    """Return (winning option id, unanimous) for a non-empty vote list."""
    counts = Counter(v.option_id for v in votes)
    first_seen = list(dict.fromkeys(v.option_id for v in votes))
    winner = max(first_seen, key=lambda option_id: counts[option_id])
    return winner, len(counts) == 1


def _resolve(
    progress: SessionProgress,
    decision: Decision,
    option: DecisionOption,
    votes: list[Vote],
    consensus_reached: bool,
    fallback: bool,
) -> DecisionOutcome:
    progress.pending_votes.pop(decision.id, None)
    progress.decisions.append(DecisionRecord(
        decision_id=decision.id,
        option_id=option.id,
        coordination=decision.coordination,
        consensus_reached=consensus_reached,
        fallback=fallback,
        votes=votes,
    ))
    if fallback:
        logger.info(
            "decision settled by majority session=%s decision=%s option=%s",
            progress.session_id, decision.id, option.id,
        )
    return DecisionOutcome(
        decision_id=decision.id,
        resolved=True,
        option_id=option.id,
        consensus_reached=consensus_reached,
        fallback=fallback,
        consequences=option.consequences,
        unlocks_endings=option.unlocks_endings,
        blocks_endings=option.blocks_endings,
    )


def record_vote(
    catalog: AdventureCatalog,
    progress: SessionProgress,
    decision_id: str,
    option_id: str,
    player_id: str,
) -> DecisionOutcome:
    """Record one player's choice and resolve the decision when it can be."""
    decision = catalog.decision(decision_id)
    option = catalog.option(decision_id, option_id)
    if player_id not in progress.players:
        raise NotFoundError("player", player_id)
    if progress.decision_made(decision_id):
        raise InvalidStateError(
            "decision_already_made",
            f"Decision {decision_id!r} has already been made",
            decision_id=decision_id,
        )

    votes = progress.pending_votes.setdefault(decision_id, [])
    if any(v.player_id == player_id for v in votes):
        raise InvalidStateError(
            "duplicate_vote",
            f"Player {player_id!r} already voted on {decision_id!r}",
            decision_id=decision_id,
            player_id=player_id,
        )
    votes.append(Vote(player_id=player_id, option_id=option_id))
    logger.debug(
        "vote session=%s decision=%s player=%s option=%s",
        progress.session_id, decision_id, player_id, option_id,
    )

    if decision.coordination == "single":
        return _resolve(progress, decision, option, list(votes), True, False)

    voted = {v.player_id for v in votes}
    pending = [p for p in progress.players if p not in voted]
    if pending:
        return DecisionOutcome(decision_id=decision_id, resolved=False, pending_players=pending)

    winner, unanimous = tally_votes(votes)
    fallback = decision.coordination == "consensus" and not unanimous
    return _resolve(
        progress, decision, catalog.option(decision_id, winner), list(votes), unanimous, fallback
    )


def settle_pending(catalog: AdventureCatalog, progress: SessionProgress) -> list[DecisionRecord]:
    """Settle every decision that still has pending votes (session end)."""
    settled: list[DecisionRecord] = []
    for decision in catalog.adventure.decisions:
        votes = progress.pending_votes.get(decision.id)
        if not votes or progress.decision_made(decision.id):
            continue
        winner, _ = tally_votes(votes)
        _resolve(
            progress, decision, catalog.option(decision.id, winner), list(votes), False, True
        )
        settled.append(progress.decisions[-1])
    progress.pending_votes.clear()
    return settled


# ── Endings ──────────────────────────────────────────────


def requirement_met(
    req: EndingRequirement,
    choices: Mapping[str, str],
    puzzle_completion_count: int,
    consensus_flags: Mapping[str, bool],
    elapsed_minutes: float | None,
) -> bool:
    if isinstance(req, DecisionRequirement):
        return choices.get(req.decision_id) == req.option_id
    if isinstance(req, PuzzleCountRequirement):
        return puzzle_completion_count >= req.at_least
    if isinstance(req, ConsensusRequirement):
        return consensus_flags.get(req.decision_id) is req.reached
    if isinstance(req, TimeLimitRequirement):
        return elapsed_minutes is not None and elapsed_minutes <= req.max_minutes
    raise TypeError(f"Unsupported requirement: {req!r}")


def resolve_ending(
    catalog: AdventureCatalog,
    decisions: Iterable[Choice],
    puzzle_completion_count: int,
    consensus_flags: Mapping[str, bool] | None = None,
    elapsed_minutes: float | None = None,
) -> EndingResolution:
    """Pick the ending for a set of decisions and completion state.

    Deterministic: the same inputs always give the same ending.
    """
    flags = consensus_flags or {}
    choices: dict[str, str] = {}
    blocked: set[str] = set()
    for choice in decisions:
        option = catalog.option(choice.decision_id, choice.option_id)
        choices[choice.decision_id] = option.id
        blocked.update(option.blocks_endings)

    satisfied = [
        ending for ending in catalog.ordered_endings()
        if ending.id not in blocked
        and all(
            requirement_met(req, choices, puzzle_completion_count, flags, elapsed_minutes)
            for req in ending.requirements
        )
    ]
    if not satisfied:
        logger.debug("no ending satisfied, using default %s", catalog.default_ending.id)
        return EndingResolution(ending=catalog.default_ending, default_used=True)

    chosen = satisfied[0]
    candidates = [e.id for e in satisfied]
    if len(satisfied) > 1:
        logger.info("ambiguous ending resolution: %s satisfied, chose %s", candidates, chosen.id)
    return EndingResolution(ending=chosen, candidates=candidates, ambiguous=len(satisfied) > 1)
