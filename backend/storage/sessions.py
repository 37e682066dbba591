"""Session snapshots (live progress) and results (finished sessions)."""

import json
import shutil
from datetime import datetime, timezone
from typing import Any

from .core import results_dir, sessions_dir


def save_session(snapshot: dict[str, Any]) -> None:
    """Write a progress snapshot, replacing the previous one."""
    path = sessions_dir() / f"{snapshot['session_id']}.json"
    path.write_text(json.dumps(snapshot, indent=2))


def get_session(session_id: str) -> dict[str, Any] | None:
    path = sessions_dir() / f"{session_id}.json"
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def list_sessions() -> list[dict[str, Any]]:
    results = []
    for path in sorted(sessions_dir().glob("*.json")):
        results.append(json.loads(path.read_text()))
    return results


def delete_session(session_id: str) -> bool:
    path = sessions_dir() / f"{session_id}.json"
    if not path.is_file():
        return False
    path.unlink()
    return True


def save_result(outcome: dict[str, Any]) -> dict[str, Any]:
    """Store a finished session's outcome. Returns the stored record."""
    record = {**outcome, "finished_at": datetime.now(timezone.utc).isoformat()}
    path = results_dir() / f"{outcome['session_id']}.json"
    path.write_text(json.dumps(record, indent=2, ensure_ascii=False))
    return record


def get_result(session_id: str) -> dict[str, Any] | None:
    path = results_dir() / f"{session_id}.json"
    if not path.is_file():
        return None
    return json.loads(path.read_text())


def list_results(adventure_id: str, limit: int | None = None) -> list[dict[str, Any]]:
    """Results for one adventure, best total score first (earlier finish wins ties)."""
    results = []
    for path in results_dir().glob("*.json"):
        data = json.loads(path.read_text())
        if data.get("adventure_id") == adventure_id:
            results.append(data)
    results.sort(key=lambda r: (-r["score"]["total"], r["finished_at"]))
    return results[:limit] if limit is not None else results


def clear_results() -> None:
    if results_dir().exists():
        shutil.rmtree(results_dir())
    results_dir().mkdir(parents=True, exist_ok=True)
