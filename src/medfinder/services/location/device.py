"""Device position acquisition.

The platform location API is callback based: the client calls back with
either a position or a ``GeolocationPositionError`` code. Providers here turn
that into a single awaitable ``request_location`` call that either returns
``Coordinates`` or raises ``DeviceLocationError`` with a classified kind.
Providers never retry; that policy belongs to the controller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from ...models.domain import Coordinates

MIN_TIMEOUT_SECONDS = 15.0

# W3C GeolocationPositionError codes
PERMISSION_DENIED_CODE = 1
POSITION_UNAVAILABLE_CODE = 2
TIMEOUT_CODE = 3

logger = logging.getLogger(__name__)


class DeviceFailureKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


class DeviceLocationError(Exception):
    """Raised when a device position request fails."""

    def __init__(self, kind: DeviceFailureKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or kind.value)


@dataclass(frozen=True, slots=True)
class LocationOptions:
    enable_high_accuracy: bool = True
    timeout_seconds: float = 30.0
    maximum_age_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.timeout_seconds < MIN_TIMEOUT_SECONDS:
            raise ValueError(
                f"Location timeout must be at least {MIN_TIMEOUT_SECONDS:g}s, got {self.timeout_seconds:g}s"
            )
        if self.maximum_age_seconds < 0:
            raise ValueError("maximum_age_seconds cannot be negative")


@dataclass(frozen=True, slots=True)
class PositionReport:
    """What the client's platform API handed back for one position request."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error_code: Optional[int] = None
    message: Optional[str] = None
    supported: bool = True


class DeviceLocationProvider(Protocol):
    @property
    def available(self) -> bool: ...

    async def request_location(self, options: LocationOptions) -> Coordinates: ...


def classify_position_error(code: int | None) -> DeviceFailureKind:
    if code == PERMISSION_DENIED_CODE:
        return DeviceFailureKind.PERMISSION_DENIED
    if code == TIMEOUT_CODE:
        return DeviceFailureKind.TIMEOUT
    return DeviceFailureKind.POSITION_UNAVAILABLE


def _coordinates_from_report(report: PositionReport) -> Coordinates:
    if report.error_code is not None:
        raise DeviceLocationError(classify_position_error(report.error_code), report.message)
    if report.latitude is None or report.longitude is None:
        raise DeviceLocationError(DeviceFailureKind.POSITION_UNAVAILABLE, "Position report carried no coordinates")
    try:
        return Coordinates(latitude=float(report.latitude), longitude=float(report.longitude))
    except (TypeError, ValueError) as exc:
        raise DeviceLocationError(DeviceFailureKind.POSITION_UNAVAILABLE, str(exc)) from exc


class ReportedPositionProvider:
    """Provider fed by position reports pushed from the client.

    ``submit`` delivers the platform callback result; ``request_location``
    waits for the next report (or consumes one already pending). Reports are
    single use unless ``maximum_age_seconds`` allows reusing a recent fix.
    """

    def __init__(self, *, available: bool = True, clock=time.monotonic) -> None:
        self._available = available
        self._clock = clock
        self._pending: PositionReport | None = None
        self._waiter: asyncio.Future[PositionReport] | None = None
        self._last_fix: tuple[Coordinates, float] | None = None

    @property
    def available(self) -> bool:
        return self._available

    def submit(self, report: PositionReport) -> None:
        self._available = report.supported
        if self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(report)
            return
        self._pending = report

    async def request_location(self, options: LocationOptions) -> Coordinates:
        if not self._available:
            raise DeviceLocationError(DeviceFailureKind.UNSUPPORTED, "Location capability not available")

        cached = self._reusable_fix(options)
        if cached is not None:
            return cached

        report = self._pending
        self._pending = None
        if report is None:
            report = await self._wait_for_report(options.timeout_seconds)

        if not report.supported:
            raise DeviceLocationError(DeviceFailureKind.UNSUPPORTED, "Location capability not available")

        coordinates = _coordinates_from_report(report)
        self._last_fix = (coordinates, self._clock())
        return coordinates

    def _reusable_fix(self, options: LocationOptions) -> Coordinates | None:
        if options.maximum_age_seconds <= 0 or self._last_fix is None:
            return None
        coordinates, captured_at = self._last_fix
        if self._clock() - captured_at <= options.maximum_age_seconds:
            return coordinates
        return None

    async def _wait_for_report(self, timeout_seconds: float) -> PositionReport:
        loop = asyncio.get_running_loop()
        self._waiter = loop.create_future()
        try:
            return await asyncio.wait_for(self._waiter, timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            logger.debug(f"No position report arrived within {timeout_seconds:.1f}s")
            raise DeviceLocationError(DeviceFailureKind.TIMEOUT, "Position request timed out") from exc
        finally:
            self._waiter = None
