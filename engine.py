"""
ShelterEngine: the one object a UI binds to.

It owns the location session, the directory, the marker registry and the
controllers built on top of them. Construct one per map view and pass it to
whatever handles clicks and form submits.
"""

import logging
from typing import Any, Optional

from backend import SearchKind, ShelterBackend
from config import AppConfig
from directory import ShelterDirectory
from errors import LocationRequired, LookupFailure
from focus import FocusController
from geo import distance_km
from location import LocationSession, PositionProvider
from markers import MapSurface, MarkerHandle, MarkerRegistry
from models import GeoPoint
from query import QueryCoordinator, QueryResult
from render import DetailView, ListView, detail_model, directions_url, list_view

logger = logging.getLogger(__name__)


class ShelterEngine:
    def __init__(
        self,
        config: AppConfig,
        provider: PositionProvider,
        surface: MapSurface,
        backend: Optional[ShelterBackend] = None,
        container: Any = "map",
    ):
        self.config = config
        self.surface = surface
        self.backend = backend or ShelterBackend(config.backend)

        self.location = LocationSession(provider, config.location)
        self.directory = ShelterDirectory()
        self.markers = MarkerRegistry(surface, epsilon=config.map.marker_epsilon)
        self.focus_controller = FocusController(
            self.directory, self.markers, surface,
            focus_zoom=config.map.focus_zoom,
            user_location=lambda: self.user_location,
        )
        self.queries = QueryCoordinator(
            self.backend, self.directory, self.markers, self.focus_controller, surface,
            user_location=lambda: self.user_location,
            on_marker_click=self.marker_clicked,
        )
        self.user_marker: Optional[MarkerHandle] = None
        self.last_error: Optional[str] = None

        surface.create_map(container, config.map.default_center, config.map.default_zoom)

        # Checked once; the UI disables "locate me" when this is False
        self.location_supported = self.location.supported
        if not self.location_supported:
            logger.warning("Location services are not available on this platform")

    @property
    def user_location(self) -> Optional[GeoPoint]:
        return self.location.last_location

    # ── Location ────────────────────────────────────────────────────────────

    async def locate_only(self) -> GeoPoint:
        point = await self.location.acquire()
        self._show_user_marker(point)
        return point

    async def locate(self, limit: Optional[int] = None) -> QueryResult:
        """Get a fresh fix, then load the nearest shelters around it."""
        point = await self.locate_only()
        return await self.queries.nearest(point, self._limit(limit))

    def _show_user_marker(self, point: GeoPoint) -> None:
        if self.user_marker is not None:
            self.surface.destroy_marker(self.user_marker)
        self.user_marker = self.surface.create_marker(point, kind="user")
        self.surface.create_popover(self.user_marker, "Current location")
        self.surface.set_center(point)
        self.surface.set_zoom(self.config.map.default_zoom)
        self.surface.open_popover(self.user_marker)

    # ── Queries ─────────────────────────────────────────────────────────────

    async def nearest(self, limit: Optional[int] = None) -> QueryResult:
        if self.user_location is None:
            raise LocationRequired()
        return await self.queries.nearest(self.user_location, self._limit(limit))

    async def within_radius(self, radius_km: float) -> QueryResult:
        if self.user_location is None:
            raise LocationRequired()
        return await self.queries.within_radius(self.user_location, radius_km)

    async def search(self, kind: SearchKind, keyword: str) -> QueryResult:
        return await self.queries.search(kind, keyword)

    def _limit(self, limit: Optional[int]) -> int:
        return self.config.default_limit if limit is None else limit

    async def shelter_detail(self, shelter_id) -> Optional[DetailView]:
        """Fetch one shelter by id. Does not touch the directory or the map."""
        record = await self.backend.shelter(shelter_id)
        if record is None:
            return None
        if record.location is not None and self.user_location is not None:
            record.distance_from_user = distance_km(self.user_location, record.location)
        return detail_model(record, self.user_location)

    async def initialize_data(self) -> str:
        status = await self.backend.initialize()
        logger.info(f"Dataset reload: {status}")
        return status

    # ── Focus & detail ──────────────────────────────────────────────────────

    def focus(self, index: int) -> None:
        self.focus_controller.focus_by_list_index(index)

    def marker_clicked(self, handle: MarkerHandle) -> None:
        """Click callback registered with the map surface for every marker."""
        try:
            self.focus_controller.focus_by_marker_click(handle)
        except LookupFailure as e:
            self.last_error = e.user_message
            logger.warning(f"Marker click ignored: {e}")

    def detail(self, index: int) -> Optional[DetailView]:
        return self.focus_controller.open_detail(index)

    def directions(self, index: int) -> Optional[str]:
        record = self.directory.get(index)
        if record.location is None:
            return None
        return directions_url(record.location, self.user_location)

    def list_view(self) -> ListView:
        return list_view(self.directory)
