import shutil
import time
from pathlib import Path

import pytest

from backend import sessions, storage
from cluequest import AdventureCatalog

TEST_DATA_DIR = Path("data-tests")
PRESETS_DIR = Path(__file__).parent / "presets"


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def tiny_adventure() -> dict:
    """Three scenes, three puzzles, one team decision, three endings."""
    return {
        "id": "tiny-heist",
        "title": "Tiny Heist",
        "duration_minutes": 30,
        "max_players": 4,
        "scenes": [
            {"id": "lobby", "order": 1, "puzzles": ["door-code"]},
            {
                "id": "vault", "order": 2, "puzzles": ["safe", "riddle"],
                "unlock": {"required_scenes": ["lobby"], "required_puzzles": ["door-code"]},
            },
            {
                "id": "escape", "order": 3,
                "unlock": {"required_decisions": ["loot"]},
            },
        ],
        "puzzles": [
            {"id": "door-code", "scene_id": "lobby", "answers": ["1234"]},
            {
                "id": "safe", "scene_id": "vault", "answers": ["Golden Key"],
                "alternative_answers": ["gold key"],
            },
            {
                "id": "riddle", "scene_id": "vault", "answers": ["midnight meeting"],
                "match": "fuzzy", "allow_partial_credit": True,
                "partial_credit_threshold": 0.8,
            },
        ],
        "hints": [
            {"id": "dc-1", "puzzle_id": "door-code", "level": "subtle", "text": "Count up."},
            {
                "id": "dc-2", "puzzle_id": "door-code", "level": "obvious",
                "text": "Four digits.", "cost": 10, "cooldown": 60,
            },
            {
                "id": "dc-3", "puzzle_id": "door-code", "level": "direct",
                "text": "It is 1234.", "cost": 25, "cooldown": 120,
            },
        ],
        "decisions": [
            {
                "id": "loot",
                "scene_id": "vault",
                "question": "Take the diamonds?",
                "coordination": "consensus",
                "options": [
                    {"id": "take", "text": "Take them", "consequences": ["Alarm rings"]},
                    {"id": "leave", "text": "Leave them", "blocks_endings": ["rich"]},
                ],
            },
        ],
        "endings": [
            {
                "id": "rich",
                "title": "Rich",
                "type": "success",
                "requirements": [
                    {"type": "decision", "decision_id": "loot", "option_id": "take"},
                    {"type": "puzzle_count", "at_least": 3},
                ],
                "narrative": "{{team}} got away with it.",
                "score": 500,
                "unlockable_content": ["clean-run"],
            },
            {
                "id": "honest",
                "title": "Honest",
                "requirements": [
                    {"type": "decision", "decision_id": "loot", "option_id": "leave"},
                ],
                "score": 200,
            },
            {"id": "caught", "title": "Caught", "type": "failure", "narrative": "Caught."},
        ],
        "default_ending_id": "caught",
        "achievements": [
            {"id": "clean-run", "name": "Clean Run", "requires_no_hints": True},
        ],
    }


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe and re-init data-tests/ before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR, presets_dir=PRESETS_DIR)
    sessions.reset()
    yield
    # leave data-tests around after tests for inspection; CI can ignore it


@pytest.fixture
def clock():
    fake = FakeClock()
    sessions.set_clock(fake)
    yield fake
    sessions.set_clock(time.time)


@pytest.fixture
def adventure_data() -> dict:
    return tiny_adventure()


@pytest.fixture
def catalog(adventure_data) -> AdventureCatalog:
    return AdventureCatalog.from_dict(adventure_data)
