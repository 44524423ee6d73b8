"""Shared request parameter helpers."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..models.domain import Coordinates


def reference_point(lat: float | None, lon: float | None) -> Coordinates | None:
    """Build the ranking reference from optional query parameters."""
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Both 'lat' and 'lon' are required when ranking by distance.",
        )
    try:
        return Coordinates(latitude=lat, longitude=lon)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
