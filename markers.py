"""
Map surface interface and the registry that ties directory indices to markers.

The registry keeps exactly one marker per located directory record and makes
sure at most one popover is open across all of them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable, Optional

from errors import MarkerNotFound
from models import GeoPoint
from render import popover_model

logger = logging.getLogger(__name__)

MarkerHandle = Hashable


# ── Map Surface ─────────────────────────────────────────────────────────────

class MapSurface(ABC):
    """What the engine needs from a map widget. It never draws anything itself."""

    @abstractmethod
    def create_map(self, container: Any, center: GeoPoint, zoom: int) -> None: ...

    @abstractmethod
    def set_center(self, point: GeoPoint) -> None: ...

    @abstractmethod
    def set_zoom(self, level: int) -> None: ...

    @abstractmethod
    def fit_bounds(self, points: list[GeoPoint]) -> None: ...

    @abstractmethod
    def create_marker(self, point: GeoPoint, kind: str = "shelter") -> MarkerHandle: ...

    @abstractmethod
    def destroy_marker(self, handle: MarkerHandle) -> None: ...

    @abstractmethod
    def marker_position(self, handle: MarkerHandle) -> GeoPoint: ...

    @abstractmethod
    def create_popover(self, handle: MarkerHandle, content: Any) -> None: ...

    @abstractmethod
    def open_popover(self, handle: MarkerHandle) -> None: ...

    @abstractmethod
    def close_popover(self, handle: MarkerHandle) -> None: ...

    @abstractmethod
    def on_marker_click(self, handle: MarkerHandle, callback: Callable[[MarkerHandle], None]) -> None: ...


# ── Marker Registry ─────────────────────────────────────────────────────────

class MarkerRegistry:
    def __init__(self, surface: MapSurface, epsilon: float = 1e-6):
        self.surface = surface
        self.epsilon = epsilon
        self._by_index: dict[int, MarkerHandle] = {}
        self._by_handle: dict[MarkerHandle, int] = {}
        self._handles: list[MarkerHandle] = []
        self._open: Optional[MarkerHandle] = None

    def rebuild(
        self,
        directory,
        surface: Optional[MapSurface] = None,
        on_click: Optional[Callable[[MarkerHandle], None]] = None,
    ) -> None:
        """Drop every marker, then create one per located record in directory order."""
        self.clear()
        if surface is not None:
            self.surface = surface

        skipped = 0
        for index, record in enumerate(directory):
            if record.location is None:
                skipped += 1
                continue
            handle = self.surface.create_marker(record.location)
            self.surface.create_popover(handle, popover_model(index, record))
            if on_click is not None:
                self.surface.on_marker_click(handle, on_click)
            self._by_index[index] = handle
            self._by_handle[handle] = index
            self._handles.append(handle)

        if skipped:
            logger.debug(f"{skipped} shelters have no coordinates; no marker created")

    def open(self, index: int) -> None:
        handle = self._by_index.get(index)
        if handle is None:
            raise MarkerNotFound(index)
        self.open_marker(handle)

    def open_marker(self, handle: MarkerHandle) -> None:
        if handle not in self._by_handle:
            raise MarkerNotFound()
        self._close_others(handle)
        self.surface.open_popover(handle)
        self._open = handle

    def find_by_location(self, point: GeoPoint, epsilon: Optional[float] = None) -> int:
        """
        Recovery lookup by marker position when the forward map has no entry.
        A match re-links the index to its marker.
        """
        eps = self.epsilon if epsilon is None else epsilon
        for handle in self._handles:
            pos = self.surface.marker_position(handle)
            if abs(pos.latitude - point.latitude) < eps and abs(pos.longitude - point.longitude) < eps:
                index = self._by_handle[handle]
                self._by_index.setdefault(index, handle)
                return index
        raise MarkerNotFound()

    def clear(self) -> None:
        if self._open is not None:
            self.surface.close_popover(self._open)
            self._open = None
        for handle in self._handles:
            self.surface.destroy_marker(handle)
        self._handles = []
        self._by_index.clear()
        self._by_handle.clear()

    def forget(self, index: int) -> None:
        """Drop the index->marker link only; the marker stays on the map."""
        self._by_index.pop(index, None)

    def marker_for(self, index: int) -> Optional[MarkerHandle]:
        return self._by_index.get(index)

    def index_for(self, handle: MarkerHandle) -> int:
        try:
            return self._by_handle[handle]
        except KeyError:
            raise MarkerNotFound() from None

    @property
    def open_index(self) -> Optional[int]:
        if self._open is None:
            return None
        return self._by_handle.get(self._open)

    def __len__(self) -> int:
        return len(self._handles)

    def _close_others(self, keep: MarkerHandle) -> None:
        # Close every other marker's popover, not just the tracked one:
        # the surface may have opened one on its own.
        for handle in self._handles:
            if handle != keep:
                self.surface.close_popover(handle)
        if self._open != keep:
            self._open = None
