"""Location resolution state machine.

``LocationResolutionController`` owns the request state and the current
``ResolvedLocation``. A device failure fails the request and counts towards
the retry policy while keeping the last known location. A geocoding failure
only degrades the address: the request still resolves with the raw fix.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Awaitable, Callable, Optional

from ...models.domain import Coordinates, ResolvedLocation
from .backoff import BackoffPolicy
from .device import DeviceFailureKind, DeviceLocationError, DeviceLocationProvider, LocationOptions
from .geocoder import GeocodeFailure, GeocodeOutcome, ReverseGeocoder

FAILURE_MESSAGES = {
    DeviceFailureKind.PERMISSION_DENIED: "Please enable location services in your browser settings",
    DeviceFailureKind.POSITION_UNAVAILABLE: "Location information is unavailable. Please try again",
    DeviceFailureKind.TIMEOUT: "Location request timed out. Please try again",
    DeviceFailureKind.UNSUPPORTED: "Your browser doesn't support location services",
}
DEGRADED_NOTICE = "Could not get your precise location details. Using coordinates only."
RETRY_HINT = "Having trouble? Make sure you've granted location permissions and try refreshing the page."

# Failures worth retrying without user action.
AUTO_RETRY_KINDS = frozenset({DeviceFailureKind.POSITION_UNAVAILABLE, DeviceFailureKind.TIMEOUT})

logger = logging.getLogger(__name__)


class LocationStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RESOLVED = "resolved"
    FAILED = "failed"


def describe_failure(kind: DeviceFailureKind) -> str:
    return FAILURE_MESSAGES.get(kind, "Could not get your location")


@dataclass(frozen=True, slots=True)
class LocationSnapshot:
    status: LocationStatus
    location: Optional[ResolvedLocation]
    retry_count: int
    error: Optional[str] = None
    notice: Optional[str] = None
    failure_kind: Optional[DeviceFailureKind] = None
    retry_after_seconds: Optional[float] = None

    @property
    def is_loading(self) -> bool:
        return self.status is LocationStatus.LOADING

    @property
    def retry_allowed(self) -> bool:
        return self.failure_kind is not DeviceFailureKind.UNSUPPORTED

    @property
    def hint(self) -> Optional[str]:
        if self.retry_count > 0 and self.retry_allowed:
            return RETRY_HINT
        return None


class LocationResolutionController:
    """Orchestrates a device provider and a reverse geocoder.

    Only one device request runs at a time: calling ``refresh`` while a
    request is in flight joins that request instead of starting another.
    """

    def __init__(
        self,
        provider: DeviceLocationProvider,
        geocoder: ReverseGeocoder,
        *,
        options: LocationOptions | None = None,
        backoff: BackoffPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.geocoder = geocoder
        self.options = options or LocationOptions()
        self.backoff = backoff or BackoffPolicy()
        self._sleep = sleep
        self._status = LocationStatus.IDLE
        self._location: ResolvedLocation | None = None
        self._error: str | None = None
        self._notice: str | None = None
        self._failure_kind: DeviceFailureKind | None = None
        self._inflight: asyncio.Task[LocationSnapshot] | None = None

    @property
    def status(self) -> LocationStatus:
        return self._status

    @property
    def location(self) -> ResolvedLocation | None:
        return self._location

    @property
    def retry_count(self) -> int:
        return self.backoff.attempt

    def snapshot(self) -> LocationSnapshot:
        retryable = self._status is LocationStatus.FAILED and self._failure_kind is not DeviceFailureKind.UNSUPPORTED
        return LocationSnapshot(
            status=self._status,
            location=self._location,
            retry_count=self.retry_count,
            error=self._error,
            notice=self._notice,
            failure_kind=self._failure_kind,
            retry_after_seconds=self.backoff.next_delay() if retryable else None,
        )

    async def refresh(self) -> LocationSnapshot:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Location request already in flight; joining it")
            return await asyncio.shield(self._inflight)

        previous = (self._status, self._error, self._notice, self._failure_kind)
        self._status = LocationStatus.LOADING
        self._error = None
        self._notice = None
        self._failure_kind = None
        self._inflight = asyncio.ensure_future(self._run())
        self._inflight.add_done_callback(partial(self._restore_if_cancelled, previous))
        return await asyncio.shield(self._inflight)

    async def resolve_with_retries(self) -> LocationSnapshot:
        """Refresh, then keep retrying transient device failures with backoff."""
        snapshot = await self.refresh()
        while (
            snapshot.status is LocationStatus.FAILED
            and snapshot.failure_kind in AUTO_RETRY_KINDS
            and not self.backoff.exhausted
        ):
            delay = self.backoff.next_delay()
            logger.info(f"Retrying location request in {delay:.1f}s (attempt {self.retry_count + 1}/{self.backoff.max_attempts})")
            await self._sleep(delay)
            snapshot = await self.refresh()
        return snapshot

    def cancel(self) -> bool:
        """Cancel the in-flight request, if any."""
        if self._inflight is None or self._inflight.done():
            return False
        return self._inflight.cancel()

    async def _run(self) -> LocationSnapshot:
        try:
            coordinates = await self.provider.request_location(self.options)
        except DeviceLocationError as exc:
            return self._fail(exc)
        outcome = await self._geocode(coordinates)
        return self._resolve(coordinates, outcome)

    def _restore_if_cancelled(
        self,
        previous: tuple[LocationStatus, Optional[str], Optional[str], Optional[DeviceFailureKind]],
        task: asyncio.Task,
    ) -> None:
        if task.cancelled():
            self._status, self._error, self._notice, self._failure_kind = previous

    async def _geocode(self, coordinates: Coordinates) -> GeocodeOutcome:
        try:
            return await self.geocoder.resolve(coordinates)
        except Exception as exc:
            logger.exception("Reverse geocoder raised unexpectedly")
            return GeocodeFailure(reason=str(exc), provider=getattr(self.geocoder, "name", "unknown"))

    def _fail(self, exc: DeviceLocationError) -> LocationSnapshot:
        self.backoff.record_failure()
        self._status = LocationStatus.FAILED
        self._failure_kind = exc.kind
        self._error = describe_failure(exc.kind)
        logger.warning(f"Device location failed ({exc.kind.value}): {exc}; retry count {self.retry_count}")
        return self.snapshot()

    def _resolve(self, coordinates: Coordinates, outcome: GeocodeOutcome) -> LocationSnapshot:
        if isinstance(outcome, GeocodeFailure):
            logger.info(f"Using coordinates only after geocoding failure: {outcome.reason}")
            self._location = ResolvedLocation.degraded(coordinates)
            self._notice = DEGRADED_NOTICE
        else:
            self._location = ResolvedLocation(
                area=outcome.area,
                postal_code=outcome.postal_code,
                latitude=coordinates.latitude,
                longitude=coordinates.longitude,
            )
        self._status = LocationStatus.RESOLVED
        self.backoff.reset()
        return self.snapshot()
