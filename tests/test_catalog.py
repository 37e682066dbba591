"""Tests for cluequest.catalog: indexing, reference checks, lookups."""

import pytest

from cluequest import AdventureCatalog, AdventureConfigError, NotFoundError


# ── Building ─────────────────────────────────────────────


def test_builds_from_valid_dict(catalog):
    assert catalog.id == "tiny-heist"
    assert catalog.scene_order == ["lobby", "vault", "escape"]


def test_scene_order_follows_order_field(adventure_data):
    adventure_data["scenes"][0]["order"] = 9
    catalog = AdventureCatalog.from_dict(adventure_data)
    assert catalog.scene_order == ["vault", "escape", "lobby"]


def test_field_errors_become_config_error(adventure_data):
    del adventure_data["default_ending_id"]
    with pytest.raises(AdventureConfigError) as exc:
        AdventureCatalog.from_dict(adventure_data)
    assert any("default_ending_id" in p for p in exc.value.problems)


def test_collects_every_reference_problem(adventure_data):
    adventure_data["puzzles"][0]["scene_id"] = "attic"
    adventure_data["hints"][0]["puzzle_id"] = "ghost"
    adventure_data["default_ending_id"] = "nowhere"
    with pytest.raises(AdventureConfigError) as exc:
        AdventureCatalog.from_dict(adventure_data)
    problems = exc.value.problems
    assert len(problems) >= 3
    assert any("attic" in p for p in problems)
    assert any("ghost" in p for p in problems)
    assert any("nowhere" in p for p in problems)


def test_duplicate_ids_rejected(adventure_data):
    adventure_data["endings"].append({"id": "rich", "title": "Again"})
    with pytest.raises(AdventureConfigError, match="duplicate ending"):
        AdventureCatalog.from_dict(adventure_data)


def test_puzzle_must_be_listed_by_its_scene(adventure_data):
    adventure_data["scenes"][1]["puzzles"] = ["safe"]
    with pytest.raises(AdventureConfigError, match="not listed"):
        AdventureCatalog.from_dict(adventure_data)


def test_two_hints_at_same_level_rejected(adventure_data):
    adventure_data["hints"][1]["level"] = "subtle"
    with pytest.raises(AdventureConfigError, match="more than one subtle"):
        AdventureCatalog.from_dict(adventure_data)


def test_ending_requirement_must_name_real_option(adventure_data):
    adventure_data["endings"][0]["requirements"][0]["option_id"] = "burn"
    with pytest.raises(AdventureConfigError, match="loot/burn"):
        AdventureCatalog.from_dict(adventure_data)


def test_unknown_achievement_rejected(adventure_data):
    adventure_data["endings"][0]["unlockable_content"] = ["trophy"]
    with pytest.raises(AdventureConfigError, match="trophy"):
        AdventureCatalog.from_dict(adventure_data)


def test_unlock_on_self_rejected(adventure_data):
    adventure_data["scenes"][1]["unlock"]["required_scenes"] = ["vault"]
    with pytest.raises(AdventureConfigError, match="requires itself"):
        AdventureCatalog.from_dict(adventure_data)


def test_min_players_above_max_rejected(adventure_data):
    adventure_data["min_players"] = 6
    with pytest.raises(AdventureConfigError, match="min_players"):
        AdventureCatalog.from_dict(adventure_data)


def test_config_error_is_a_value_error(adventure_data):
    adventure_data["default_ending_id"] = "nowhere"
    with pytest.raises(ValueError):
        AdventureCatalog.from_dict(adventure_data)


# ── Lookups ──────────────────────────────────────────────


def test_lookups(catalog):
    assert catalog.scene("vault").puzzles == ["safe", "riddle"]
    assert catalog.puzzle("safe").answers == ["Golden Key"]
    assert catalog.hint("dc-2").cost == 10
    assert catalog.decision("loot").coordination == "consensus"
    assert catalog.option("loot", "leave").blocks_endings == ["rich"]
    assert catalog.ending("honest").score == 200
    assert catalog.achievement("clean-run").requires_no_hints


@pytest.mark.parametrize("lookup, ident, kind", [
    ("scene", "attic", "scene"),
    ("puzzle", "ghost", "puzzle"),
    ("hint", "h9", "hint"),
    ("decision", "vote", "decision"),
    ("ending", "happy", "ending"),
    ("achievement", "gold", "achievement"),
])
def test_unknown_ids_raise_not_found(catalog, lookup, ident, kind):
    with pytest.raises(NotFoundError) as exc:
        getattr(catalog, lookup)(ident)
    assert exc.value.kind == kind
    assert exc.value.ident == ident


def test_unknown_option(catalog):
    with pytest.raises(NotFoundError) as exc:
        catalog.option("loot", "burn")
    assert exc.value.kind == "option"
    with pytest.raises(NotFoundError) as exc:
        catalog.option("vote", "take")
    assert exc.value.kind == "decision"


def test_hints_for(catalog):
    ladder = catalog.hints_for("door-code")
    assert [h.id for h in ladder.values()] == ["dc-1", "dc-2", "dc-3"]
    assert catalog.hints_for("safe") == {}
    with pytest.raises(NotFoundError):
        catalog.hints_for("ghost")


def test_decisions_in(catalog):
    assert [d.id for d in catalog.decisions_in("vault")] == ["loot"]
    assert catalog.decisions_in("lobby") == []


def test_default_ending(catalog):
    assert catalog.default_ending.id == "caught"


def test_ordered_endings_excludes_default(catalog):
    assert [e.id for e in catalog.ordered_endings()] == ["rich", "honest"]


def test_ordered_endings_priority_beats_specificity(adventure_data):
    adventure_data["endings"][1]["priority"] = 5
    catalog = AdventureCatalog.from_dict(adventure_data)
    assert [e.id for e in catalog.ordered_endings()] == ["honest", "rich"]


def test_stats(catalog):
    stats = catalog.stats()
    assert stats["id"] == "tiny-heist"
    assert stats["players"] == {"min": 1, "max": 4}
    assert stats["scenes"] == 3
    assert stats["puzzles"] == 3
    assert stats["hints"] == 3
    assert stats["decisions"] == 1
    assert stats["endings"] == 3
    assert stats["achievements"] == 1
