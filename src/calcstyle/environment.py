"""Environment sources: live host metrics consumed by env() expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class EnvironmentSource(Protocol):
    """Capability injected by the host to answer env() lookups."""

    def get_scroll_offset(self) -> float: ...

    def get_scroll_extent(self) -> float: ...

    def get_viewport_height(self) -> float: ...


@dataclass(frozen=True)
class StaticEnvironment:
    """A snapshot of document scroll metrics.

    The scroll extent is the largest of the document heights and the viewport
    height, mirroring how a browser reports the scrollable height of a page.
    """

    scroll_offset: float = 0.0
    document_heights: tuple[float, ...] = ()
    viewport_height: float = 0.0

    def get_scroll_offset(self) -> float:
        return self.scroll_offset

    def get_scroll_extent(self) -> float:
        return max((*self.document_heights, self.viewport_height))

    def get_viewport_height(self) -> float:
        return self.viewport_height


NULL_ENVIRONMENT = StaticEnvironment()
