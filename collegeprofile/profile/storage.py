"""Profile storage backends.

We support in-memory and JSON-file-backed storage. Both keep plain stored
documents (camelCase dicts) and hand out :class:`Profile` copies, so the
core never aliases stored state. A MongoDB-backed implementation only needs
to provide the same three methods.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..errors import PersistenceError
from .schemas import Profile

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    """Minimal interface expected by the profile service and orchestrator."""

    def find_by_key(self, user_id: str) -> Optional[Profile]:  # pragma: no cover - interface only
        ...

    def save(self, profile: Profile) -> None:  # pragma: no cover - interface only
        ...

    def update_field(
        self, user_id: str, matcher: Mapping[str, Any], field_path: str, value: Any
    ) -> bool:  # pragma: no cover - interface only
        ...


def _matches(item: Any, matcher: Mapping[str, Any]) -> bool:
    return isinstance(item, dict) and all(item.get(k) == v for k, v in matcher.items())


def set_by_path(doc: Dict[str, Any], path: str, value: Any, matcher: Optional[Mapping[str, Any]] = None) -> bool:
    """Set a nested value on a stored document using a dot-separated path.

    A ``$`` segment selects the first element of the list before it whose
    fields equal every ``matcher`` entry, e.g.
    ``set_by_path(doc, "collegeList.reach.$.reasons", [...], {"name": "MIT"})``.
    Returns False, without writing, when a list segment has no match or an
    intermediate value is not a container.
    """
    parts = [p for p in path.split(".") if p]
    if not parts:
        return False

    cur: Any = doc
    for key in parts[:-1]:
        if key == "$":
            if not isinstance(cur, list):
                return False
            found = next((item for item in cur if _matches(item, matcher or {})), None)
            if found is None:
                return False
            cur = found
            continue
        if not isinstance(cur, dict):
            return False
        if key not in cur or cur.get(key) is None:
            cur[key] = {}
        cur = cur[key]

    if not isinstance(cur, dict) or parts[-1] == "$":
        return False
    cur[parts[-1]] = copy.deepcopy(value)
    return True


class InMemoryProfileStore:
    """Volatile store, useful for tests or ephemeral sessions."""

    def __init__(self) -> None:
        self._docs: Dict[str, Dict[str, Any]] = {}
        # Every successful write, in order: ("save", user_id) or ("update_field", user_id, path).
        self.writes: List[tuple] = []

    def find_by_key(self, user_id: str) -> Optional[Profile]:
        doc = self._docs.get(user_id)
        if doc is None:
            return None
        return Profile.from_document(copy.deepcopy(doc))

    def save(self, profile: Profile) -> None:
        self._docs[profile.user_id] = profile.to_document()
        self.writes.append(("save", profile.user_id))

    def update_field(self, user_id: str, matcher: Mapping[str, Any], field_path: str, value: Any) -> bool:
        doc = self._docs.get(user_id)
        if doc is None:
            return False
        if not set_by_path(doc, field_path, value, matcher):
            return False
        self.writes.append(("update_field", user_id, field_path))
        return True


class JsonFileProfileStore:
    """Very simple JSON-file-backed profile store.

    The on-disk format is a single JSON object mapping ``userId`` to its
    profile document. Targeted updates re-read the file right before
    writing so they only touch the addressed field.
    """

    def __init__(self, path: str | os.PathLike = "data/profiles.json") -> None:
        self.path = Path(path)
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt profile file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Corrupt profile file {self.path}: expected a JSON object")
        return data

    def _save_all(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

    def find_by_key(self, user_id: str) -> Optional[Profile]:
        doc = self._load_all().get(user_id)
        if doc is None:
            return None
        return Profile.from_document(doc)

    def save(self, profile: Profile) -> None:
        data = self._load_all()
        data[profile.user_id] = profile.to_document()
        self._save_all(data)
        logger.debug("Saved profile %s", profile.user_id)

    def update_field(self, user_id: str, matcher: Mapping[str, Any], field_path: str, value: Any) -> bool:
        data = self._load_all()
        doc = data.get(user_id)
        if doc is None:
            return False
        if not set_by_path(doc, field_path, value, matcher):
            return False
        self._save_all(data)
        logger.debug("Updated %s on profile %s", field_path, user_id)
        return True
