"""Shop listing endpoints."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, HTTPException, Query, status

from ...data import catalog_repository
from ...db.supabase import CatalogUnavailableError
from ...schemas.catalog import MedicineListingModel, ShopListingModel, ShopListResponse
from ...services.geospatial import rank_by_distance
from ...services.search import SearchResultPresenter, catalog
from ..dependencies import reference_point

router = APIRouter(prefix="/shops", tags=["shops"])


@router.get("", response_model=ShopListResponse, status_code=status.HTTP_200_OK)
def list_shops(
    lat: float | None = Query(default=None, ge=-90, le=90, description="Caller latitude"),
    lon: float | None = Query(default=None, ge=-180, le=180, description="Caller longitude"),
    q: str | None = Query(default=None, description="Optional name/address filter"),
    max_distance_km: float | None = Query(default=None, gt=0, description="Optional search radius"),
    limit: int | None = Query(default=None, ge=1, le=500),
) -> ShopListResponse:
    reference = reference_point(lat, lon)
    try:
        ranked = catalog.nearby_shops(reference, term=q, max_distance_km=max_distance_km, limit=limit)
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    listings = SearchResultPresenter().present_shops(ranked)
    return ShopListResponse(
        items=[ShopListingModel.model_validate(listing) for listing in listings],
        total=len(listings),
        ranked=reference is not None,
    )


@router.get("/{shop_id}/medicines", response_model=list[MedicineListingModel], status_code=status.HTTP_200_OK)
def list_shop_medicines(
    shop_id: str,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lon: float | None = Query(default=None, ge=-180, le=180),
) -> list[MedicineListingModel]:
    reference = reference_point(lat, lon)
    try:
        shop = catalog_repository.get_shop(shop_id)
        if shop is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Shop '{shop_id}' not found.")
        medicines = catalog_repository.list_shop_medicines(shop_id)
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

    stocked = [replace(medicine, shop=shop) for medicine in medicines]
    listings = SearchResultPresenter().present_medicines(rank_by_distance(reference, stocked))
    return [MedicineListingModel.model_validate(listing) for listing in listings]
