"""Cache of task listings rendered by the board page.

Entries are grouped by collection path; the task service calls
``invalidate(path)`` after each successful mutation. Every invalidation
bumps the path's generation, and ``put`` drops a value read under an
older generation, so a listing loaded while a mutation landed is never
stored.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ListingCache:
    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._generations: Dict[str, int] = {}
        self._lock = threading.Lock()

    def generation(self, path: str) -> int:
        with self._lock:
            return self._generations.get(path, 0)

    def get(self, path: str, key: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(path, {}).get(key)

    def put(self, path: str, key: str, value: Any, generation: Optional[int] = None) -> bool:
        """Store ``value`` unless ``path`` was invalidated since ``generation`` was read."""
        with self._lock:
            if generation is not None and generation != self._generations.get(path, 0):
                return False
            self._entries.setdefault(path, {})[key] = value
            return True

    def invalidate(self, path: str) -> None:
        with self._lock:
            dropped = self._entries.pop(path, None)
            self._generations[path] = self._generations.get(path, 0) + 1
        logger.debug("listing cache invalidated path=%s entries=%s", path, len(dropped or {}))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._entries.values())
