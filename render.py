"""
Presentation models for the shelter list, marker popovers and detail view.

Nothing here builds markup. Each function returns a small frozen record with
every free-text field already HTML-escaped, so a template can drop the values
in as-is. Backend text is never trusted.
"""

import html
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from models import GeoPoint, ShelterRecord

KAKAO_MAP_LINK = "https://map.kakao.com/link"

UNNAMED = "Unnamed shelter"
NO_ADDRESS = "No address"
NOT_AVAILABLE = "N/A"
EMPTY_MESSAGE = "No shelters found."


def escape(text) -> str:
    if text is None or text == "":
        return ""
    return html.escape(str(text), quote=True)


def distance_label(distance: Optional[float]) -> str:
    # A zero distance is shown as no distance
    if not distance:
        return ""
    return f"{distance:.2f}km"


def capacity_label(capacity: Optional[int]) -> str:
    return f"{capacity} people" if capacity else NOT_AVAILABLE


@dataclass(frozen=True)
class ListItem:
    index: int
    name: str
    address: str
    distance: str
    capacity: str
    contact: str


@dataclass(frozen=True)
class ListView:
    items: tuple
    count_label: str
    empty_message: str = ""


@dataclass(frozen=True)
class Popover:
    index: int
    name: str
    distance: str
    capacity: str
    location: Optional[GeoPoint] = None

    def map_url(self, user_location: Optional[GeoPoint] = None) -> str:
        """Link built from wherever the user is now, not when the marker was made."""
        if self.location is None:
            return ""
        return directions_url(self.location, user_location)


@dataclass(frozen=True)
class DetailView:
    title: str
    name: str
    address: str
    distance: str
    capacity: str
    facility_area: str
    management_agency: str
    contact: str
    designation_date: str
    directions_url: str = ""


def list_item_model(index: int, record: ShelterRecord) -> ListItem:
    return ListItem(
        index=index,
        name=escape(record.name or UNNAMED),
        address=escape(record.address or NO_ADDRESS),
        distance=distance_label(record.distance_from_user),
        capacity=capacity_label(record.accommodation_capacity),
        contact=escape(record.contact_number or NOT_AVAILABLE),
    )


def list_view(records) -> ListView:
    items = tuple(list_item_model(i, r) for i, r in enumerate(records))
    return ListView(
        items=items,
        count_label=f"{len(items)} result" + ("" if len(items) == 1 else "s"),
        empty_message="" if items else EMPTY_MESSAGE,
    )


def popover_model(index: int, record: ShelterRecord) -> Popover:
    return Popover(
        index=index,
        name=escape(record.name or "Shelter"),
        distance=distance_label(record.distance_from_user),
        capacity=capacity_label(record.accommodation_capacity),
        location=record.location,
    )


def detail_model(record: ShelterRecord, user_location: Optional[GeoPoint] = None) -> DetailView:
    return DetailView(
        title=escape(record.name or "Shelter details"),
        name=escape(record.name or NOT_AVAILABLE),
        address=escape(record.address or NOT_AVAILABLE),
        distance=distance_label(record.distance_from_user),
        capacity=capacity_label(record.accommodation_capacity),
        facility_area=escape(record.facility_area or NOT_AVAILABLE),
        management_agency=escape(record.management_agency or NOT_AVAILABLE),
        contact=escape(record.contact_number or NOT_AVAILABLE),
        designation_date=escape(record.designation_date or NOT_AVAILABLE),
        directions_url=directions_url(record.location, user_location) if record.location else "",
    )


def directions_url(point: GeoPoint, user_location: Optional[GeoPoint] = None,
                   label: str = "Shelter") -> str:
    """Directions from the user if known, otherwise just show the spot."""
    target = f"{quote(label)},{point.latitude},{point.longitude}"
    if user_location is None:
        return f"{KAKAO_MAP_LINK}/map/{target}"
    origin = f"{quote('Current location')},{user_location.latitude},{user_location.longitude}"
    return f"{KAKAO_MAP_LINK}/to/{target}/from/{origin}"
