"""
Ordered, index-addressable set of shelters currently on display.

The index of a record is its identity for the lifetime of one result set;
``load`` replaces everything at once.
"""

import logging
from typing import Iterator

from errors import RecordNotFound
from geo import distance_km
from models import GeoPoint, ShelterRecord

logger = logging.getLogger(__name__)


class ShelterDirectory:
    def __init__(self, records=None):
        self._records: list[ShelterRecord] = list(records or [])

    def load(self, records) -> None:
        """Replace the whole result set. Prior indices become invalid."""
        self._records = list(records)

    def rank(self, user_location: GeoPoint) -> None:
        """
        Annotate each located record with its distance from the user and
        stable-sort ascending. Records without coordinates keep no distance
        and move after the ranked ones, in their existing order.
        """
        located, unlocated = [], []
        for record in self._records:
            if record.location is None:
                record.distance_from_user = None
                unlocated.append(record)
                continue
            record.distance_from_user = distance_km(user_location, record.location)
            located.append(record)

        located.sort(key=lambda r: r.distance_from_user)
        self._records = located + unlocated

        if unlocated:
            logger.debug(f"{len(unlocated)} shelters without coordinates left unranked")

    def get(self, index: int) -> ShelterRecord:
        if not isinstance(index, int) or not 0 <= index < len(self._records):
            raise RecordNotFound(index)
        return self._records[index]

    def locations(self) -> list[GeoPoint]:
        return [r.location for r in self._records if r.location is not None]

    @property
    def is_empty(self) -> bool:
        return not self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ShelterRecord]:
        return iter(self._records)
