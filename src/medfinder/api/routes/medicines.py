"""Medicine search endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from ...db.supabase import CatalogUnavailableError
from ...schemas.catalog import MedicineListingModel, MedicineSearchResponse
from ...services.search import SearchResultPresenter, catalog
from ..dependencies import reference_point

router = APIRouter(prefix="/medicines", tags=["medicines"])


@router.get("/search", response_model=MedicineSearchResponse, status_code=status.HTTP_200_OK)
def search_medicines(
    q: str = Query(..., min_length=1, description="Medicine name or part of it"),
    lat: float | None = Query(default=None, ge=-90, le=90, description="Caller latitude"),
    lon: float | None = Query(default=None, ge=-180, le=180, description="Caller longitude"),
    max_distance_km: float | None = Query(default=None, gt=0),
    limit: int | None = Query(default=None, ge=1, le=500),
) -> MedicineSearchResponse:
    reference = reference_point(lat, lon)
    try:
        ranked = catalog.search_medicines_near(q, reference, max_distance_km=max_distance_km, limit=limit)
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    listings = SearchResultPresenter().present_medicines(ranked)
    return MedicineSearchResponse(
        query=q,
        items=[MedicineListingModel.model_validate(listing) for listing in listings],
        total=len(listings),
        ranked=reference is not None,
    )
