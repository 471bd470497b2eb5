"""
Shelter data model and normalization of backend JSON records.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    def format(self) -> str:
        return f"{self.latitude:.6f}, {self.longitude:.6f}"


@dataclass
class ShelterRecord:
    """Normalized shelter from the backend."""
    id: Optional[str]
    name: str
    address: str
    location: Optional[GeoPoint] = None
    accommodation_capacity: Optional[int] = None
    contact_number: Optional[str] = None
    facility_area: Optional[str] = None
    management_agency: Optional[str] = None
    designation_date: Optional[str] = None
    distance_from_user: Optional[float] = None   # Set by ranking only

    @classmethod
    def from_json(cls, item: dict) -> "ShelterRecord":
        return cls(
            id=_text(item.get("id")),
            name=item.get("shelterName") or "",
            address=item.get("address") or "",
            location=_location(item.get("latitude"), item.get("longitude")),
            accommodation_capacity=_int(item.get("accommodationCapacity")),
            contact_number=_text(item.get("contactNumber")),
            facility_area=_text(item.get("facilityArea")),
            management_agency=_text(item.get("managementAgency")),
            designation_date=_text(item.get("designationDate")),
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "shelterName": self.name,
            "address": self.address,
            "latitude": self.location.latitude if self.location else None,
            "longitude": self.location.longitude if self.location else None,
            "accommodationCapacity": self.accommodation_capacity,
            "contactNumber": self.contact_number,
            "facilityArea": self.facility_area,
            "managementAgency": self.management_agency,
            "designationDate": self.designation_date,
            "distanceFromUser": self.distance_from_user,
        }


def parse_records(payload: Any) -> list[ShelterRecord]:
    """Normalize a JSON array of shelters, skipping malformed items."""
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")

    records = []
    for item in payload:
        try:
            records.append(ShelterRecord.from_json(item))
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug(f"Skipping shelter item: {e}")
    return records


def _location(lat: Any, lng: Any) -> Optional[GeoPoint]:
    # Zero or missing coordinates mean "not geocoded"
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not lat or not lng:
        return None
    try:
        return GeoPoint(lat, lng)
    except ValueError:
        return None


def _int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)
