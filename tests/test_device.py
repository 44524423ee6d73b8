import asyncio

import pytest

from src.medfinder.models.domain import Coordinates
from src.medfinder.services.location import device
from src.medfinder.services.location.device import (
    DeviceFailureKind,
    DeviceLocationError,
    LocationOptions,
    PositionReport,
    ReportedPositionProvider,
    classify_position_error,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _request(provider: ReportedPositionProvider, options: LocationOptions | None = None) -> Coordinates:
    return asyncio.run(provider.request_location(options or LocationOptions()))


def test_location_options_defaults_prefer_fresh_accurate_fixes():
    options = LocationOptions()

    assert options.enable_high_accuracy is True
    assert options.timeout_seconds >= 15
    assert options.maximum_age_seconds == 0


def test_location_options_reject_short_timeout():
    with pytest.raises(ValueError):
        LocationOptions(timeout_seconds=5)


@pytest.mark.parametrize(
    "code, kind",
    [
        (1, DeviceFailureKind.PERMISSION_DENIED),
        (2, DeviceFailureKind.POSITION_UNAVAILABLE),
        (3, DeviceFailureKind.TIMEOUT),
        (42, DeviceFailureKind.POSITION_UNAVAILABLE),
    ],
)
def test_classify_position_error(code, kind):
    assert classify_position_error(code) is kind


def test_unavailable_capability_fails_immediately():
    provider = ReportedPositionProvider(available=False)

    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider)

    assert excinfo.value.kind is DeviceFailureKind.UNSUPPORTED


def test_unsupported_report_switches_capability_off():
    provider = ReportedPositionProvider()
    provider.submit(PositionReport(supported=False))

    assert provider.available is False
    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider)
    assert excinfo.value.kind is DeviceFailureKind.UNSUPPORTED


def test_pending_report_is_returned_as_coordinates():
    provider = ReportedPositionProvider()
    provider.submit(PositionReport(latitude=12.9716, longitude=77.5946))

    assert _request(provider) == Coordinates(12.9716, 77.5946)


@pytest.mark.parametrize(
    "code, kind",
    [(1, DeviceFailureKind.PERMISSION_DENIED), (2, DeviceFailureKind.POSITION_UNAVAILABLE), (3, DeviceFailureKind.TIMEOUT)],
)
def test_error_report_raises_classified_failure(code, kind):
    provider = ReportedPositionProvider()
    provider.submit(PositionReport(error_code=code, message="denied by user"))

    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider)

    assert excinfo.value.kind is kind


def test_report_without_usable_coordinates_is_unavailable():
    provider = ReportedPositionProvider()
    provider.submit(PositionReport(latitude=12.9716))

    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider)
    assert excinfo.value.kind is DeviceFailureKind.POSITION_UNAVAILABLE

    provider.submit(PositionReport(latitude=123.0, longitude=77.0))
    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider)
    assert excinfo.value.kind is DeviceFailureKind.POSITION_UNAVAILABLE


def test_request_waits_for_next_report():
    provider = ReportedPositionProvider()

    async def scenario() -> Coordinates:
        pending = asyncio.ensure_future(provider.request_location(LocationOptions()))
        await asyncio.sleep(0)
        provider.submit(PositionReport(latitude=13.0, longitude=77.6))
        return await pending

    assert asyncio.run(scenario()) == Coordinates(13.0, 77.6)


def test_consumed_report_is_not_reused_and_wait_times_out(monkeypatch):
    monkeypatch.setattr(device, "MIN_TIMEOUT_SECONDS", 0.01)
    options = LocationOptions(timeout_seconds=0.05)
    provider = ReportedPositionProvider()
    provider.submit(PositionReport(latitude=13.0, longitude=77.6))

    assert _request(provider, options) == Coordinates(13.0, 77.6)
    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider, options)
    assert excinfo.value.kind is DeviceFailureKind.TIMEOUT


def test_positive_maximum_age_reuses_recent_fix(monkeypatch):
    monkeypatch.setattr(device, "MIN_TIMEOUT_SECONDS", 0.01)
    clock = FakeClock()
    provider = ReportedPositionProvider(clock=clock)
    options = LocationOptions(timeout_seconds=0.05, maximum_age_seconds=60)
    provider.submit(PositionReport(latitude=13.0, longitude=77.6))

    assert _request(provider, options) == Coordinates(13.0, 77.6)
    clock.now += 30
    assert _request(provider, options) == Coordinates(13.0, 77.6)

    clock.now += 60
    with pytest.raises(DeviceLocationError) as excinfo:
        _request(provider, options)
    assert excinfo.value.kind is DeviceFailureKind.TIMEOUT
