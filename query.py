"""
Runs shelter queries and swaps the result set into the directory and map.

Every query takes a request id before it first awaits. When a response
settles after a newer query was issued, it is dropped instead of applied, so
the most recently issued query always wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from backend import SearchKind
from directory import ShelterDirectory
from errors import StaleResponse
from focus import FocusController
from geo import bounding_box, within_radius
from markers import MapSurface, MarkerHandle, MarkerRegistry
from models import GeoPoint, ShelterRecord

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    request_id: int
    count: int
    ranked: bool


class QueryCoordinator:
    def __init__(
        self,
        backend,
        directory: ShelterDirectory,
        registry: MarkerRegistry,
        focus: FocusController,
        surface: MapSurface,
        user_location: Callable[[], Optional[GeoPoint]] = lambda: None,
        on_marker_click: Optional[Callable[[MarkerHandle], None]] = None,
    ):
        self.backend = backend
        self.directory = directory
        self.registry = registry
        self.focus = focus
        self.surface = surface
        self._user_location = user_location
        self.on_marker_click = on_marker_click
        self._latest_id = 0

    async def nearest(self, user_location: GeoPoint, limit: int) -> QueryResult:
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        request_id = self._next_id()
        logger.info(f"Nearest {limit} shelters to {user_location.format()}")

        records = await self.backend.nearest(user_location, limit)
        self._ensure_current(request_id)
        return self._apply(request_id, records, rank_from=user_location)

    async def within_radius(self, user_location: GeoPoint, radius_km: float) -> QueryResult:
        if radius_km <= 0:
            raise ValueError(f"radius must be positive, got {radius_km}")
        request_id = self._next_id()
        logger.info(f"Shelters within {radius_km}km of {user_location.format()}")

        records = await self.backend.within_radius(user_location, radius_km)
        self._ensure_current(request_id)
        return self._apply(request_id, records, rank_from=user_location, radius_km=radius_km)

    async def search(self, kind, keyword: str) -> QueryResult:
        kind = SearchKind(kind)
        keyword = (keyword or "").strip()
        if not keyword:
            raise ValueError("search keyword is empty")
        request_id = self._next_id()
        logger.info(f"Searching shelters by {kind.value}: {keyword!r}")

        records = await self.backend.search(kind, keyword)
        self._ensure_current(request_id)
        if not records:
            logger.warning(f"No shelters match {kind.value} {keyword!r}")
        # Only rank when we know where the user is
        return self._apply(request_id, records, rank_from=self._user_location())

    def _apply(
        self,
        request_id: int,
        records: list[ShelterRecord],
        rank_from: Optional[GeoPoint],
        radius_km: Optional[float] = None,
    ) -> QueryResult:
        # No awaits below: the swap is atomic on the event loop
        self.directory.load(records)
        if rank_from is not None:
            self.directory.rank(rank_from)
            if radius_km is not None:
                self.directory.load(
                    r for r in self.directory
                    if r.location is not None and within_radius(rank_from, r.location, radius_km)
                )

        self.focus.reset()
        self.registry.rebuild(self.directory, on_click=self.on_marker_click)
        self._fit_viewport()

        logger.info(f"Request {request_id}: showing {len(self.directory)} shelters, {len(self.registry)} markers")
        return QueryResult(request_id=request_id, count=len(self.directory), ranked=rank_from is not None)

    def _fit_viewport(self) -> None:
        points = self.directory.locations()
        if not points:
            return
        user = self._user_location()
        if user is not None:
            points.append(user)
        south_west, north_east = bounding_box(points)
        self.surface.fit_bounds([south_west, north_east])

    def _next_id(self) -> int:
        self._latest_id += 1
        return self._latest_id

    def _ensure_current(self, request_id: int) -> None:
        if request_id != self._latest_id:
            logger.info(f"Dropping stale response for request {request_id} (latest is {self._latest_id})")
            raise StaleResponse(request_id, self._latest_id)
