"""
One-shot acquisition of the user's position.

The platform side (browser geolocation, GPS daemon, fixed coordinates) is a
``PositionProvider``. ``LocationSession`` adds the request options, the
timeout, single-flight behaviour and failure categorisation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from config import LocationSettings
from errors import (
    LocationFailure,
    LocationTimeout,
    LocationUnknown,
    LocationUnsupported,
)
from models import GeoPoint

logger = logging.getLogger(__name__)


class PositionProvider(ABC):
    """Abstract source of position fixes."""

    @property
    def supported(self) -> bool:
        return True

    @abstractmethod
    async def current_position(
        self, high_accuracy: bool, timeout: float, maximum_age: float
    ) -> GeoPoint:
        """Return a fresh fix or raise a LocationFailure subclass."""
        ...


class StaticPositionProvider(PositionProvider):
    """Always reports the same coordinates (command line, kiosks)."""

    def __init__(self, point: Optional[GeoPoint]):
        self.point = point

    @property
    def supported(self) -> bool:
        return self.point is not None

    async def current_position(self, high_accuracy, timeout, maximum_age) -> GeoPoint:
        return self.point


class LocationSession:
    def __init__(self, provider: PositionProvider, settings: Optional[LocationSettings] = None):
        self.provider = provider
        self.settings = settings or LocationSettings()
        self.last_location: Optional[GeoPoint] = None
        self.status: str = ""
        self._pending: Optional[asyncio.Task] = None

    @property
    def supported(self) -> bool:
        return self.provider.supported

    async def acquire(self) -> GeoPoint:
        """
        Request a fresh fix. A call made while another is in flight waits on
        the same request instead of starting a second one.
        """
        if not self.supported:
            raise LocationUnsupported()

        if self._pending is None or self._pending.done():
            self.status = "Getting your location..."
            self._pending = asyncio.ensure_future(self._request())
        return await asyncio.shield(self._pending)

    async def _request(self) -> GeoPoint:
        s = self.settings
        try:
            point = await asyncio.wait_for(
                self.provider.current_position(s.high_accuracy, s.timeout_seconds, s.maximum_age),
                timeout=s.timeout_seconds,
            )
        except asyncio.TimeoutError:
            return self._fail(LocationTimeout())
        except LocationFailure as e:
            return self._fail(e)
        except Exception as e:
            logger.error(f"Position provider error: {e}")
            return self._fail(LocationUnknown(str(e)))

        self.last_location = point
        self.status = f"Current location: {point.format()}"
        logger.info(self.status)
        return point

    def _fail(self, error: LocationFailure):
        self.status = error.user_message
        logger.warning(f"Location failed: {error}")
        raise error
