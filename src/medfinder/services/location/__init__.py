"""Location resolution services."""

from .backoff import BackoffPolicy
from .controller import LocationResolutionController, LocationSnapshot, LocationStatus, describe_failure
from .device import (
    DeviceFailureKind,
    DeviceLocationError,
    LocationOptions,
    PositionReport,
    ReportedPositionProvider,
)
from .geocoder import (
    ChainedReverseGeocoder,
    GeocodeFailure,
    GeocodeResult,
    GoogleReverseGeocoder,
    NominatimReverseGeocoder,
    build_reverse_geocoder,
)
from .sessions import LocationSession, LocationSessionRegistry

__all__ = [
    "BackoffPolicy",
    "ChainedReverseGeocoder",
    "DeviceFailureKind",
    "DeviceLocationError",
    "GeocodeFailure",
    "GeocodeResult",
    "GoogleReverseGeocoder",
    "LocationOptions",
    "LocationResolutionController",
    "LocationSession",
    "LocationSessionRegistry",
    "LocationSnapshot",
    "LocationStatus",
    "NominatimReverseGeocoder",
    "PositionReport",
    "ReportedPositionProvider",
    "build_reverse_geocoder",
    "describe_failure",
]
