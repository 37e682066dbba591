"""File-based JSON storage.

Data layout:
  data/
    adventures/          User-imported adventure definitions (<id>.json)
    sessions/            Live session progress snapshots (<session_id>.json)
    results/             Finished session outcomes (<session_id>.json)
    config.json          App settings (hint budget, persistence, leaderboard)
  presets/
    adventures/          Built-in read-only adventures (merged at read time)

Preset merging: list_adventures() and get_adventure() merge preset + user
data; user data wins on id collision. Deleting a user override reveals the
preset. get_catalog() validates a definition once and caches the catalog
until the adventure is saved or deleted.

Config: get_config() returns defaults merged with stored values.
update_config() overwrites known keys and ignores the rest.
"""

# Re-export all public symbols so `from backend import storage` keeps working.

from .core import (  # noqa: F401
    adventures_dir,
    data_dir,
    init_storage,
    preset_adventures_dir,
    presets_dir,
    results_dir,
    sessions_dir,
    slugify,
)

from .adventures import (  # noqa: F401
    delete_adventure,
    get_adventure,
    get_catalog,
    list_adventures,
    save_adventure,
)

from .sessions import (  # noqa: F401
    clear_results,
    delete_session,
    get_result,
    get_session,
    list_results,
    list_sessions,
    save_result,
    save_session,
)

from .config import (  # noqa: F401
    get_config,
    update_config,
)
