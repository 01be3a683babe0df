from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogCache:
    """A JSON file holding the last downloaded catalog.

    Layout: ``{"fetchedAt": <epoch ms>, "data": [...], "lastModified": str|null}``.
    A missing, unreadable or stale file is a cache miss.
    """

    path: str
    ttl_s: float = 60 * 60
    clock: Callable[[], float] = time.time

    def _load(self) -> dict[str, Any] | None:
        p = Path(self.path)
        if not p.exists():
            return None
        try:
            parsed = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable catalog cache %s: %s", self.path, exc)
            return None
        return parsed if isinstance(parsed, dict) else None

    def read(self) -> list | None:
        parsed = self._load()
        if not parsed:
            return None
        data = parsed.get("data")
        fetched_at = parsed.get("fetchedAt")
        if not isinstance(data, list) or not isinstance(fetched_at, (int, float)):
            return None
        age_s = self.clock() - fetched_at / 1000
        if age_s >= self.ttl_s:
            logger.debug("Catalog cache is stale (%.0fs old)", age_s)
            return None
        return data

    def write(self, data: list, last_modified: str | None = None) -> None:
        payload = {
            "fetchedAt": int(self.clock() * 1000),
            "data": data,
            "lastModified": last_modified or None,
        }
        p = Path(self.path)
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write catalog cache %s: %s", self.path, exc)

    def last_modified(self) -> str | None:
        parsed = self._load()
        if not parsed:
            return None
        return parsed.get("lastModified") or None
