"""
Failure taxonomy for the shelter engine.

Every error carries a ``user_message`` suitable for an alert or toast.
Presentation is left to the caller.
"""


class ShelterError(Exception):
    user_message = "Something went wrong."

    def __init__(self, message: str = ""):
        super().__init__(message or self.user_message)


# ── Location ────────────────────────────────────────────────────────────────

class LocationFailure(ShelterError):
    user_message = "Could not get your location."


class PermissionDenied(LocationFailure):
    user_message = "Location permission was denied. Allow location access in your browser settings."


class PositionUnavailable(LocationFailure):
    user_message = "Location information is unavailable."


class LocationTimeout(LocationFailure):
    user_message = "The location request timed out."


class LocationUnknown(LocationFailure):
    user_message = "An unknown error occurred while getting your location."


class LocationUnsupported(LocationFailure):
    user_message = "This platform does not support location services."


class LocationRequired(LocationFailure):
    user_message = "Set your current location first."


# ── Backend ─────────────────────────────────────────────────────────────────

class BackendFailure(ShelterError):
    user_message = "Failed to fetch shelter data."


class RequestFailed(BackendFailure):
    pass


class NonSuccessStatus(BackendFailure):
    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Backend returned HTTP {status_code}")


class StaleResponse(ShelterError):
    """A newer query was issued while this one was in flight."""
    user_message = "A newer request replaced this one."

    def __init__(self, request_id: int, latest_id: int):
        self.request_id = request_id
        self.latest_id = latest_id
        super().__init__(f"Request {request_id} superseded by {latest_id}")


# ── Lookup ──────────────────────────────────────────────────────────────────

class LookupFailure(ShelterError):
    pass


class RecordNotFound(LookupFailure):
    user_message = "The selected shelter could not be found."

    def __init__(self, index):
        self.index = index
        super().__init__(f"No shelter at index {index}")


class MarkerNotFound(LookupFailure):
    user_message = "No map marker exists for this shelter."

    def __init__(self, index=None):
        self.index = index
        super().__init__(f"No marker for index {index}" if index is not None else self.user_message)
