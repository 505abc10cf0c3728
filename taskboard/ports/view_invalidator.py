"""Port for telling the view layer that cached listings are stale."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IViewInvalidator(Protocol):
    def invalidate(self, path: str) -> None:
        """Drop every cached view keyed under ``path``."""


class NullInvalidator:
    """Invalidator for callers without a view layer, such as scripts."""

    def invalidate(self, path: str) -> None:
        return None
