"""Adventure definitions (merged presets + user imports) and catalog cache."""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from cluequest import AdventureCatalog, AdventureConfigError

from .core import adventures_dir, preset_adventures_dir, slugify

logger = logging.getLogger(__name__)

_catalogs: dict[str, AdventureCatalog] = {}

_META_KEYS = ("source", "imported_at")


def _definition(data: dict[str, Any]) -> dict[str, Any]:
    """Strip storage metadata so the dict validates as an Adventure."""
    return {k: v for k, v in data.items() if k not in _META_KEYS}


def _summary(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": data["id"],
        "title": data.get("title", ""),
        "description": data.get("description", ""),
        "duration_minutes": data.get("duration_minutes"),
        "source": data["source"],
    }


def list_adventures() -> list[dict[str, Any]]:
    by_id: dict[str, dict[str, Any]] = {}
    # Presets first (lower priority)
    if preset_adventures_dir().is_dir():
        for path in sorted(preset_adventures_dir().glob("*.json")):
            data = json.loads(path.read_text())
            data["id"] = path.stem
            data["source"] = "preset"
            by_id[path.stem] = _summary(data)
    # User imports override
    for path in sorted(adventures_dir().glob("*.json")):
        data = json.loads(path.read_text())
        data["source"] = "user"
        by_id[path.stem] = _summary(data)
    return list(by_id.values())


def get_adventure(adventure_id: str) -> dict[str, Any] | None:
    # Data dir first
    user_path = adventures_dir() / f"{adventure_id}.json"
    if user_path.is_file():
        data = json.loads(user_path.read_text())
        data["source"] = "user"
        return data
    # Preset fallback
    preset_path = preset_adventures_dir() / f"{adventure_id}.json"
    if preset_path.is_file():
        data = json.loads(preset_path.read_text())
        data["id"] = adventure_id
        data["source"] = "preset"
        return data
    return None


def get_catalog(adventure_id: str) -> AdventureCatalog | None:
    """Return the validated catalog for an adventure, building it once."""
    catalog = _catalogs.get(adventure_id)
    if catalog is not None:
        return catalog
    data = get_adventure(adventure_id)
    if data is None:
        return None
    catalog = AdventureCatalog.from_dict(_definition(data))
    _catalogs[adventure_id] = catalog
    return catalog


def save_adventure(data: dict[str, Any]) -> dict[str, Any]:
    """Validate and store a user adventure (upsert). Returns the stored dict.

    The id defaults to the slugified title. Raises AdventureConfigError
    listing every problem when the definition is invalid.
    """
    definition = _definition(data)
    definition.setdefault("id", slugify(str(definition.get("title", ""))))
    if slugify(definition["id"]) != definition["id"]:
        raise AdventureConfigError([f"id {definition['id']!r} is not a valid slug"])
    try:
        catalog = AdventureCatalog.from_dict(definition)
    except AdventureConfigError as e:
        logger.warning("rejected adventure %s: %s", definition["id"], e.problems)
        raise

    stored = {**definition, "imported_at": datetime.now(timezone.utc).isoformat()}
    path = adventures_dir() / f"{catalog.id}.json"
    path.write_text(json.dumps(stored, indent=2, ensure_ascii=False))
    _catalogs[catalog.id] = catalog
    stored["source"] = "user"
    return stored


def delete_adventure(adventure_id: str) -> bool:
    """Delete a user adventure. Deleting an override reveals the preset."""
    path = adventures_dir() / f"{adventure_id}.json"
    if not path.is_file():
        return False
    path.unlink()
    _catalogs.pop(adventure_id, None)
    return True
