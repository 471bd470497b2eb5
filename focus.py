"""
Selecting a shelter from the list, from the map, or programmatically.
"""

import logging
from typing import Callable, Optional

from directory import ShelterDirectory
from errors import LookupFailure, MarkerNotFound
from markers import MapSurface, MarkerHandle, MarkerRegistry
from models import GeoPoint
from render import DetailView, detail_model

logger = logging.getLogger(__name__)


class FocusController:
    def __init__(
        self,
        directory: ShelterDirectory,
        registry: MarkerRegistry,
        surface: MapSurface,
        focus_zoom: int = 3,
        user_location: Callable[[], Optional[GeoPoint]] = lambda: None,
    ):
        self.directory = directory
        self.registry = registry
        self.surface = surface
        self.focus_zoom = focus_zoom
        self._user_location = user_location
        self.detail: Optional[DetailView] = None

    @property
    def focused_index(self) -> Optional[int]:
        return self.registry.open_index

    def focus_by_list_index(self, index: int) -> None:
        """
        Center the map on the shelter's marker and open its popover.

        Raises RecordNotFound for an unknown index and MarkerNotFound when the
        shelter has no marker even after the coordinate fallback. Neither
        changes the map.
        """
        record = self.directory.get(index)
        handle = self.registry.marker_for(index)
        if handle is None:
            if record.location is None:
                raise MarkerNotFound(index)
            logger.warning(f"No marker linked to shelter {index}; matching by coordinates")
            try:
                found = self.registry.find_by_location(record.location)
            except LookupFailure:
                raise MarkerNotFound(index) from None
            handle = self.registry.marker_for(found)

        self.surface.set_center(self.surface.marker_position(handle))
        self.surface.set_zoom(self.focus_zoom)
        self.registry.open_marker(handle)

    def focus_by_marker_click(self, handle: MarkerHandle) -> None:
        """The marker is already on screen, so only the popover changes."""
        index = self.registry.index_for(handle)
        self.directory.get(index)
        self.registry.open_marker(handle)

    def open_detail(self, index: int) -> Optional[DetailView]:
        try:
            record = self.directory.get(index)
        except LookupFailure:
            return None
        self.detail = detail_model(record, self._user_location())
        return self.detail

    def reset(self) -> None:
        self.detail = None
