"""Indexed, validated adventure definitions.

An ``AdventureCatalog`` is built once per adventure and passed into every
session that plays it. All id lookups go through dicts built here, so an
unknown id has exactly one error path: ``NotFoundError``.

Validation checks cross references (scene ↔ puzzle ownership, unlock
conditions, hints, decision scenes, ending requirements, default ending)
and collects every problem before raising ``AdventureConfigError``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from cluequest.errors import AdventureConfigError, NotFoundError
from cluequest.models import (
    Achievement,
    Adventure,
    ConsensusRequirement,
    Decision,
    DecisionOption,
    DecisionRequirement,
    Ending,
    Hint,
    HintLevel,
    Puzzle,
    Scene,
)

logger = logging.getLogger(__name__)


def _index(items: list, kind: str, problems: list[str]) -> dict[str, Any]:
    index: dict[str, Any] = {}
    for item in items:
        if item.id in index:
            problems.append(f"duplicate {kind} id {item.id!r}")
        index[item.id] = item
    return index


class AdventureCatalog:
    def __init__(self, adventure: Adventure) -> None:
        self.adventure = adventure
        problems: list[str] = []

        self._scenes: dict[str, Scene] = _index(adventure.scenes, "scene", problems)
        self._puzzles: dict[str, Puzzle] = _index(adventure.puzzles, "puzzle", problems)
        self._hints: dict[str, Hint] = _index(adventure.hints, "hint", problems)
        self._decisions: dict[str, Decision] = _index(adventure.decisions, "decision", problems)
        self._endings: dict[str, Ending] = _index(adventure.endings, "ending", problems)
        self._achievements: dict[str, Achievement] = _index(
            adventure.achievements, "achievement", problems
        )

        self._ladders: dict[str, dict[HintLevel, Hint]] = {}
        for hint in adventure.hints:
            ladder = self._ladders.setdefault(hint.puzzle_id, {})
            if hint.level in ladder:
                problems.append(
                    f"puzzle {hint.puzzle_id!r} has more than one {hint.level} hint"
                )
            ladder[hint.level] = hint

        self._options: dict[str, dict[str, DecisionOption]] = {}
        for decision in adventure.decisions:
            options = self._options.setdefault(decision.id, {})
            for option in decision.options:
                if option.id in options:
                    problems.append(
                        f"decision {decision.id!r} has duplicate option {option.id!r}"
                    )
                options[option.id] = option

        self.scene_order: list[str] = [
            s.id for s in sorted(adventure.scenes, key=lambda s: s.order)
        ]

        problems.extend(self._check_references())
        if problems:
            raise AdventureConfigError(problems)
        logger.debug(
            "catalog built adventure=%s scenes=%d puzzles=%d endings=%d",
            adventure.id, len(adventure.scenes), len(adventure.puzzles), len(adventure.endings),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AdventureCatalog":
        """Validate raw adventure JSON and build a catalog.

        Pydantic field errors are folded into the same AdventureConfigError
        as reference errors.
        """
        try:
            adventure = Adventure.model_validate(data)
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise AdventureConfigError(problems) from e
        return cls(adventure)

    # ------------------------------------------------------------------
    # Reference checks
    # ------------------------------------------------------------------

    def _check_references(self) -> list[str]:
        problems: list[str] = []
        adv = self.adventure

        for puzzle in adv.puzzles:
            scene = self._scenes.get(puzzle.scene_id)
            if scene is None:
                problems.append(f"puzzle {puzzle.id!r} names unknown scene {puzzle.scene_id!r}")
            elif puzzle.id not in scene.puzzles:
                problems.append(f"puzzle {puzzle.id!r} is not listed by scene {scene.id!r}")

        for scene in adv.scenes:
            for pid in scene.puzzles:
                if pid not in self._puzzles:
                    problems.append(f"scene {scene.id!r} lists unknown puzzle {pid!r}")
            if scene.unlock is None:
                continue
            for sid in scene.unlock.required_scenes:
                if sid not in self._scenes:
                    problems.append(f"scene {scene.id!r} requires unknown scene {sid!r}")
                elif sid == scene.id:
                    problems.append(f"scene {scene.id!r} requires itself")
            for pid in scene.unlock.required_puzzles:
                if pid not in self._puzzles:
                    problems.append(f"scene {scene.id!r} requires unknown puzzle {pid!r}")
            for did in scene.unlock.required_decisions:
                if did not in self._decisions:
                    problems.append(f"scene {scene.id!r} requires unknown decision {did!r}")

        for hint in adv.hints:
            if hint.puzzle_id not in self._puzzles:
                problems.append(f"hint {hint.id!r} names unknown puzzle {hint.puzzle_id!r}")

        for decision in adv.decisions:
            if decision.scene_id not in self._scenes:
                problems.append(
                    f"decision {decision.id!r} names unknown scene {decision.scene_id!r}"
                )
            for option in decision.options:
                for eid in [*option.unlocks_endings, *option.blocks_endings]:
                    if eid not in self._endings:
                        problems.append(
                            f"option {decision.id}/{option.id} names unknown ending {eid!r}"
                        )

        for ending in adv.endings:
            for req in ending.requirements:
                if isinstance(req, (DecisionRequirement, ConsensusRequirement)):
                    if req.decision_id not in self._decisions:
                        problems.append(
                            f"ending {ending.id!r} requires unknown decision {req.decision_id!r}"
                        )
                    elif (
                        isinstance(req, DecisionRequirement)
                        and req.option_id not in self._options[req.decision_id]
                    ):
                        problems.append(
                            f"ending {ending.id!r} requires unknown option "
                            f"{req.decision_id}/{req.option_id}"
                        )
            for aid in ending.unlockable_content:
                if aid not in self._achievements:
                    problems.append(f"ending {ending.id!r} unlocks unknown achievement {aid!r}")

        if adv.default_ending_id not in self._endings:
            problems.append(f"default ending {adv.default_ending_id!r} is not defined")
        if adv.min_players > adv.max_players:
            problems.append("min_players is greater than max_players")
        return problems

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self.adventure.id

    def scene(self, scene_id: str) -> Scene:
        try:
            return self._scenes[scene_id]
        except KeyError:
            raise NotFoundError("scene", scene_id) from None

    def puzzle(self, puzzle_id: str) -> Puzzle:
        try:
            return self._puzzles[puzzle_id]
        except KeyError:
            raise NotFoundError("puzzle", puzzle_id) from None

    def hint(self, hint_id: str) -> Hint:
        try:
            return self._hints[hint_id]
        except KeyError:
            raise NotFoundError("hint", hint_id) from None

    def decision(self, decision_id: str) -> Decision:
        try:
            return self._decisions[decision_id]
        except KeyError:
            raise NotFoundError("decision", decision_id) from None

    def option(self, decision_id: str, option_id: str) -> DecisionOption:
        options = self._options.get(decision_id)
        if options is None:
            raise NotFoundError("decision", decision_id)
        try:
            return options[option_id]
        except KeyError:
            raise NotFoundError("option", f"{decision_id}/{option_id}") from None

    def ending(self, ending_id: str) -> Ending:
        try:
            return self._endings[ending_id]
        except KeyError:
            raise NotFoundError("ending", ending_id) from None

    def achievement(self, achievement_id: str) -> Achievement:
        try:
            return self._achievements[achievement_id]
        except KeyError:
            raise NotFoundError("achievement", achievement_id) from None

    def hints_for(self, puzzle_id: str) -> dict[HintLevel, Hint]:
        self.puzzle(puzzle_id)
        return dict(self._ladders.get(puzzle_id, {}))

    def decisions_in(self, scene_id: str) -> list[Decision]:
        return [d for d in self.adventure.decisions if d.scene_id == scene_id]

    @property
    def default_ending(self) -> Ending:
        return self._endings[self.adventure.default_ending_id]

    def ordered_endings(self) -> list[Ending]:
        """Endings in resolution order, default ending excluded.

        Explicit priority first (higher wins), then more requirements (more
        specific wins), then authoring order.
        """
        authored = {e.id: i for i, e in enumerate(self.adventure.endings)}
        return sorted(
            (e for e in self.adventure.endings if e.id != self.adventure.default_ending_id),
            key=lambda e: (-e.priority, -len(e.requirements), authored[e.id]),
        )

    def stats(self) -> dict[str, Any]:
        adv = self.adventure
        return {
            "id": adv.id,
            "title": adv.title,
            "duration_minutes": adv.duration_minutes,
            "players": {"min": adv.min_players, "max": adv.max_players},
            "scenes": len(adv.scenes),
            "puzzles": len(adv.puzzles),
            "hints": len(adv.hints),
            "decisions": len(adv.decisions),
            "endings": len(adv.endings),
            "achievements": len(adv.achievements),
        }
