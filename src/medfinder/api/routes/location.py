"""Location resolution endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Path, status

from ...models.domain import Coordinates, ResolvedLocation
from ...persistence import session_store
from ...schemas.location import (
    CoordinatesModel,
    LocationStateResponse,
    PositionReportModel,
    ResolvedLocationModel,
)
from ...services.location import geocoder as geocoder_module
from ...services.location import sessions as location_sessions
from ...services.location.controller import LocationStatus
from ...services.location.geocoder import GeocodeResult

router = APIRouter(prefix="/location", tags=["location"])

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


def _cache_key(session_id: str) -> str:
    return f"location:{session_id}"


@router.post("/reverse", response_model=ResolvedLocationModel, status_code=status.HTTP_200_OK)
async def reverse_geocode(payload: CoordinatesModel) -> ResolvedLocationModel:
    """Resolve coordinates to an area and postal code, degrading to coordinates only."""
    coordinates = Coordinates(latitude=payload.latitude, longitude=payload.longitude)
    outcome = await geocoder_module.build_reverse_geocoder().resolve(coordinates)
    if isinstance(outcome, GeocodeResult):
        location = ResolvedLocation(
            area=outcome.area,
            postal_code=outcome.postal_code,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
        )
    else:
        location = ResolvedLocation.degraded(coordinates)
    return ResolvedLocationModel.from_domain(location)


@router.post(
    "/sessions/{session_id}/reports",
    response_model=LocationStateResponse,
    status_code=status.HTTP_200_OK,
)
async def submit_position_report(
    payload: PositionReportModel,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
) -> LocationStateResponse:
    """Feed one device position result into the session and refresh its location."""
    session = location_sessions.get_location_registry().get_or_create(session_id)
    session.provider.submit(payload.to_report())
    snapshot = await session.controller.refresh()

    if snapshot.status is LocationStatus.RESOLVED and snapshot.location is not None:
        session_store.get_session_store().set(
            _cache_key(session_id),
            ResolvedLocationModel.from_domain(snapshot.location).model_dump(),
        )
    return LocationStateResponse.from_snapshot(session_id, snapshot)


@router.get("/sessions/{session_id}", response_model=LocationStateResponse, status_code=status.HTTP_200_OK)
async def get_location_state(session_id: str = Path(..., pattern=SESSION_ID_PATTERN)) -> LocationStateResponse:
    session = location_sessions.get_location_registry().get(session_id)
    if session is not None:
        return LocationStateResponse.from_snapshot(session_id, session.controller.snapshot())

    cached = session_store.get_session_store().get(_cache_key(session_id))
    if cached is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown location session '{session_id}'.")
    return LocationStateResponse(
        session_id=session_id,
        status=LocationStatus.RESOLVED.value,
        location=ResolvedLocationModel.model_validate(cached),
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def forget_location_session(session_id: str = Path(..., pattern=SESSION_ID_PATTERN)) -> None:
    location_sessions.get_location_registry().discard(session_id)
    session_store.get_session_store().clear(_cache_key(session_id))
    logger.debug(f"Forgot location session {session_id}")
