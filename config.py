"""
Configuration for the Shelter Finder.
Override the backend location and timeouts via environment variables.

Backend endpoints (see backend.py):
  - POST /admin/initialize          (reload the shelter dataset)
  - POST /api/nearest-shelters      (closest N shelters)
  - POST /api/shelters-in-radius    (shelters within R km)
  - GET  /api/search                (keyword search by name or address)
"""

import os
from dataclasses import dataclass, field

from models import GeoPoint


@dataclass
class BackendSettings:
    """Where the shelter API lives."""
    base_url: str = os.getenv("SHELTER_API_URL", "http://localhost:8080")
    timeout: float = float(os.getenv("SHELTER_API_TIMEOUT", "30"))


@dataclass
class LocationSettings:
    """One-shot position request options."""
    timeout_seconds: float = 10.0    # Fail if no fix arrives in time
    high_accuracy: bool = True
    maximum_age: float = 0           # Never reuse a cached fix


@dataclass
class MapSettings:
    # Zoom values are Kakao map levels: 1 is street level, larger is farther out
    # Seoul City Hall
    default_center: GeoPoint = field(default_factory=lambda: GeoPoint(37.5665, 126.9780))
    default_zoom: int = 3
    focus_zoom: int = 3
    marker_epsilon: float = 1e-6     # Degrees, for coordinate fallback lookup


@dataclass
class AppConfig:
    """Top-level configuration."""
    backend: BackendSettings = field(default_factory=BackendSettings)
    location: LocationSettings = field(default_factory=LocationSettings)
    map: MapSettings = field(default_factory=MapSettings)

    # Shelters requested per "nearest" query (UI offers 5 / 10 / 20)
    default_limit: int = 10

    # Output
    output_dir: str = os.path.expanduser("~/shelter-finder/output")
    dashboard_filename: str = "dashboard.html"
    data_filename: str = "shelters.json"
