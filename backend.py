"""
HTTP client for the shelter API.

Blocking calls go through one requests.Session. The async wrappers run them on
a worker thread so each round trip is a suspension point on the event loop.
"""

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Optional

import requests

from config import BackendSettings
from errors import NonSuccessStatus, RequestFailed
from models import GeoPoint, ShelterRecord, parse_records

logger = logging.getLogger(__name__)


class SearchKind(str, Enum):
    NAME = "name"
    ADDRESS = "address"


class ShelterBackend:
    def __init__(self, settings: Optional[BackendSettings] = None):
        self.settings = settings or BackendSettings()
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        # Queries overlap on worker threads; requests.Session is not thread-safe
        self._session_lock = threading.Lock()

    # ── Blocking calls ──────────────────────────────────────────────────────

    def initialize_sync(self) -> str:
        """Ask the server to reload its shelter dataset. Returns its status text."""
        resp = self._request("POST", "/admin/initialize")
        return resp.text

    def nearest_sync(self, location: GeoPoint, limit: int) -> list[ShelterRecord]:
        data = {"latitude": location.latitude, "longitude": location.longitude, "limit": limit}
        return self._records("POST", "/api/nearest-shelters", data=data)

    def within_radius_sync(self, location: GeoPoint, radius_km: float) -> list[ShelterRecord]:
        data = {"latitude": location.latitude, "longitude": location.longitude, "radius": radius_km}
        return self._records("POST", "/api/shelters-in-radius", data=data)

    def search_sync(self, kind: SearchKind, keyword: str) -> list[ShelterRecord]:
        params = {"type": SearchKind(kind).value, "keyword": keyword}
        return self._records("GET", "/api/search", params=params)

    def shelter_sync(self, shelter_id) -> Optional[ShelterRecord]:
        payload = self._json("GET", f"/api/shelter/{shelter_id}")
        if not payload:
            return None
        return ShelterRecord.from_json(payload)

    # ── Async wrappers ──────────────────────────────────────────────────────

    async def initialize(self) -> str:
        return await asyncio.to_thread(self.initialize_sync)

    async def nearest(self, location: GeoPoint, limit: int) -> list[ShelterRecord]:
        return await asyncio.to_thread(self.nearest_sync, location, limit)

    async def within_radius(self, location: GeoPoint, radius_km: float) -> list[ShelterRecord]:
        return await asyncio.to_thread(self.within_radius_sync, location, radius_km)

    async def search(self, kind: SearchKind, keyword: str) -> list[ShelterRecord]:
        return await asyncio.to_thread(self.search_sync, kind, keyword)

    async def shelter(self, shelter_id) -> Optional[ShelterRecord]:
        return await asyncio.to_thread(self.shelter_sync, shelter_id)

    # ── Plumbing ────────────────────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self.settings.base_url.rstrip("/") + path
        try:
            with self._session_lock:
                resp = self.session.request(method, url, timeout=self.settings.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"[backend] {method} {path} failed: {e}")
            raise RequestFailed(str(e)) from e
        if not resp.ok:
            logger.error(f"[backend] {method} {path} -> HTTP {resp.status_code}")
            raise NonSuccessStatus(resp.status_code)
        return resp

    def _json(self, method: str, path: str, **kwargs) -> Any:
        resp = self._request(method, path, **kwargs)
        # A missing entity comes back as an empty 200
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"[backend] {method} {path}: invalid JSON response")
            raise RequestFailed("Invalid JSON response") from e

    def _records(self, method: str, path: str, **kwargs) -> list[ShelterRecord]:
        payload = self._json(method, path, **kwargs)
        try:
            records = parse_records(payload)
        except ValueError as e:
            raise RequestFailed(str(e)) from e
        logger.info(f"[backend] {path}: {len(records)} shelters")
        return records
