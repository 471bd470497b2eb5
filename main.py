#!/usr/bin/env python3
"""
Shelter Finder — Main Entry Point

Finds emergency shelters near a location, ranks them by distance, and writes
a list + map dashboard.

Usage:
    python main.py --lat 35.1587 --lng 129.1604              # Nearest 10
    python main.py --lat 35.1587 --lng 129.1604 --radius 3   # Within 3 km
    python main.py --search-name "Haeundae"                  # Keyword search
    python main.py --search-address "Busan" --lat 35.15 --lng 129.16
    python main.py --initialize                              # Reload server dataset
    python main.py --shelter 42                              # One shelter by id
    python main.py --demo --lat 35.1587 --lng 129.1604 --focus 0 --open

Environment Variables:
    SHELTER_API_URL      — Base URL of the shelter API (default http://localhost:8080)
    SHELTER_API_TIMEOUT  — Request timeout in seconds
"""

import argparse
import asyncio
import logging
import os
import sys
import webbrowser
from typing import Optional

from backend import SearchKind
from config import AppConfig
from dashboard_generator import SnapshotMapSurface, generate_dashboard
from engine import ShelterEngine
from errors import ShelterError
from geo import distance_km, within_radius
from location import StaticPositionProvider
from models import GeoPoint, ShelterRecord

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


DEMO_SHELTERS = [
    # (name, address, lat, lng, capacity, agency, contact)
    ("Haeundae Elementary School", "Haeundae-ro 1, Haeundae-gu, Busan", 35.1631, 129.1636, 1200, "Haeundae-gu Office", "051-749-4000"),
    ("Dongbaek Island Park", "Udong, Haeundae-gu, Busan", 35.1534, 129.1520, 800, "Haeundae-gu Office", "051-749-4000"),
    ("Jangsan Middle School", "Jwa-dong, Haeundae-gu, Busan", 35.1697, 129.1762, 950, "Busan Office of Education", "051-860-0114"),
    ("Marine City Civic Center", "Udong 1411, Haeundae-gu, Busan", 35.1560, 129.1440, 600, "Haeundae-gu Office", "051-749-4000"),
    ("Gwangan Hilltop Shelter", "Namcheon-dong, Suyeong-gu, Busan", 35.1449, 129.1128, 700, "Suyeong-gu Office", "051-610-4000"),
    ("Songjeong Community Hall", "Songjeong-dong, Haeundae-gu, Busan", 35.1786, 129.1994, 300, "Haeundae-gu Office", None),
    ("Gijang Sports Complex", "Gijang-eup, Gijang-gun, Busan", 35.2445, 129.2222, 2500, "Gijang-gun Office", "051-709-4000"),
    ("Yeongdo Hill Park", "Yeongseon-dong, Yeongdo-gu, Busan", 35.0887, 129.0430, 500, "Yeongdo-gu Office", "051-419-4000"),
    ("Unmapped Annex <B>", "Address pending", None, None, 100, None, None),
]


class DemoBackend:
    """Serves DEMO_SHELTERS the way the real API would, without a network."""

    def __init__(self):
        self.records = [
            ShelterRecord.from_json({
                "id": i + 1,
                "shelterName": name,
                "address": address,
                "latitude": lat,
                "longitude": lng,
                "accommodationCapacity": capacity,
                "managementAgency": agency,
                "contactNumber": contact,
                "facilityArea": f"{capacity * 2} m2",
                "designationDate": "2019-07-01",
            })
            for i, (name, address, lat, lng, capacity, agency, contact) in enumerate(DEMO_SHELTERS)
        ]

    def _copy(self, records):
        return [ShelterRecord.from_json(r.to_json()) for r in records]

    async def initialize(self) -> str:
        return f"Loaded {len(self.records)} demo shelters."

    async def nearest(self, location: GeoPoint, limit: int) -> list[ShelterRecord]:
        located = [r for r in self.records if r.location]
        located.sort(key=lambda r: distance_km(location, r.location))
        return self._copy(located[:limit])

    async def within_radius(self, location: GeoPoint, radius_km: float) -> list[ShelterRecord]:
        return self._copy([
            r for r in self.records
            if r.location and within_radius(location, r.location, radius_km)
        ])

    async def search(self, kind: SearchKind, keyword: str) -> list[ShelterRecord]:
        field = "name" if SearchKind(kind) is SearchKind.NAME else "address"
        q = keyword.lower()
        return self._copy([r for r in self.records if q in getattr(r, field).lower()])

    async def shelter(self, shelter_id) -> Optional[ShelterRecord]:
        for r in self.records:
            if r.id == str(shelter_id):
                return self._copy([r])[0]
        return None


async def run(args, config: AppConfig) -> str:
    origin = None
    if args.lat is not None and args.lng is not None:
        origin = GeoPoint(args.lat, args.lng)

    backend = DemoBackend() if args.demo else None
    surface = SnapshotMapSurface()
    engine = ShelterEngine(config, StaticPositionProvider(origin), surface, backend=backend)

    if args.initialize:
        status = await engine.initialize_data()
        print(status)
        return ""

    if args.shelter is not None:
        detail = await engine.shelter_detail(args.shelter)
        if detail is None:
            logger.warning(f"No shelter with id {args.shelter}")
        else:
            logger.info(f"{detail.title}: {detail.address} ({detail.capacity}, {detail.contact})")
        return ""

    if engine.location_supported:
        await engine.locate_only()

    if args.search_name or args.search_address:
        kind = SearchKind.NAME if args.search_name else SearchKind.ADDRESS
        result = await engine.search(kind, args.search_name or args.search_address)
    elif args.radius is not None:
        result = await engine.within_radius(args.radius)
    elif engine.location_supported:
        result = await engine.nearest(args.limit)
    else:
        logger.error("Give --lat/--lng or a search keyword.")
        sys.exit(2)

    logger.info(f"{result.count} shelters ({'ranked by distance' if result.ranked else 'server order'})")

    for item in engine.list_view().items:
        distance = f" [{item.distance}]" if item.distance else ""
        logger.info(f"  {item.index:>2}. {item.name}{distance} - {item.address}")

    if args.focus is not None:
        engine.focus(args.focus)
        detail = engine.detail(args.focus)
        if detail and detail.directions_url:
            logger.info(f"Directions: {detail.directions_url}")

    return generate_dashboard(engine, config)


def main():
    parser = argparse.ArgumentParser(description="Emergency Shelter Finder")
    parser.add_argument("--lat", type=float, help="Your latitude")
    parser.add_argument("--lng", type=float, help="Your longitude")
    parser.add_argument("--limit", type=int, default=None, help="How many nearest shelters (default 10)")
    parser.add_argument("--radius", type=float, help="Find shelters within this many km instead")
    parser.add_argument("--search-name", help="Search shelters by name")
    parser.add_argument("--search-address", help="Search shelters by address")
    parser.add_argument("--focus", type=int, help="Focus the shelter at this list position")
    parser.add_argument("--shelter", help="Show one shelter by its id")
    parser.add_argument("--initialize", action="store_true", help="Ask the server to reload its dataset")
    parser.add_argument("--demo", action="store_true", help="Use built-in sample shelters (no server needed)")
    parser.add_argument("--open", action="store_true", help="Open dashboard in browser after generating")
    args = parser.parse_args()

    config = AppConfig()

    try:
        html_path = asyncio.run(run(args, config))
    except ShelterError as e:
        logger.error(e.user_message)
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(2)

    if not html_path:
        return None

    logger.info(f"JSON data saved to: {os.path.join(config.output_dir, config.data_filename)}")
    if args.open:
        webbrowser.open(f"file://{os.path.abspath(html_path)}")

    print(f"\n✅ Dashboard ready: {html_path}")
    return html_path


if __name__ == "__main__":
    main()
