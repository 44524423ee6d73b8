"""Location request/response schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import ResolvedLocation
from ..services.location.controller import LocationSnapshot
from ..services.location.device import PositionReport


class CoordinatesModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class PositionReportModel(BaseModel):
    """Result of one browser ``getCurrentPosition`` call, as posted by the client."""

    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    error_code: Optional[int] = Field(
        default=None,
        description="GeolocationPositionError code: 1 permission denied, 2 unavailable, 3 timeout.",
    )
    message: Optional[str] = None
    supported: bool = Field(default=True, description="False when the platform has no location capability.")

    def to_report(self) -> PositionReport:
        return PositionReport(
            latitude=self.latitude,
            longitude=self.longitude,
            error_code=self.error_code,
            message=self.message,
            supported=self.supported,
        )


class ResolvedLocationModel(BaseModel):
    area: str
    postal_code: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    degraded: bool = False

    @classmethod
    def from_domain(cls, location: ResolvedLocation) -> "ResolvedLocationModel":
        return cls(
            area=location.area,
            postal_code=location.postal_code,
            latitude=location.latitude,
            longitude=location.longitude,
            degraded=location.is_degraded,
        )

    def to_domain(self) -> ResolvedLocation:
        return ResolvedLocation(
            area=self.area,
            postal_code=self.postal_code,
            latitude=self.latitude,
            longitude=self.longitude,
            is_degraded=self.degraded,
        )


class LocationStateResponse(BaseModel):
    session_id: str
    status: str
    location: Optional[ResolvedLocationModel] = None
    is_loading: bool = False
    error: Optional[str] = None
    notice: Optional[str] = None
    hint: Optional[str] = None
    failure_kind: Optional[str] = None
    retry_count: int = 0
    retry_allowed: bool = True
    retry_after_seconds: Optional[float] = None

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: LocationSnapshot) -> "LocationStateResponse":
        return cls(
            session_id=session_id,
            status=snapshot.status.value,
            location=ResolvedLocationModel.from_domain(snapshot.location) if snapshot.location else None,
            is_loading=snapshot.is_loading,
            error=snapshot.error,
            notice=snapshot.notice,
            hint=snapshot.hint,
            failure_kind=snapshot.failure_kind.value if snapshot.failure_kind else None,
            retry_count=snapshot.retry_count,
            retry_allowed=snapshot.retry_allowed,
            retry_after_seconds=snapshot.retry_after_seconds,
        )
