"""Catalog queries ranked by distance from the caller's location."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ...data import catalog_repository
from ...models.domain import Medicine, RankedEntity, Shop
from ..geospatial import rank_by_distance, within_distance


def filter_shops(shops: Iterable[Shop], term: str | None) -> list[Shop]:
    """Case-insensitive match of ``term`` against shop name or address."""
    items = list(shops)
    needle = (term or "").strip().lower()
    if not needle:
        return items
    return [shop for shop in items if needle in shop.name.lower() or needle in shop.address.lower()]


def _limit_by_radius(
    ranked: Sequence[RankedEntity],
    reference: object | None,
    max_distance_km: float | None,
) -> list[RankedEntity]:
    # without a reference point there is nothing to measure the radius from
    if reference is None or getattr(reference, "latitude", None) is None:
        return list(ranked)
    return within_distance(ranked, max_distance_km)


def nearby_shops(
    reference: object | None,
    *,
    term: str | None = None,
    max_distance_km: float | None = None,
    limit: Optional[int] = None,
) -> list[RankedEntity[Shop]]:
    shops = filter_shops(catalog_repository.list_shops(), term)
    ranked = _limit_by_radius(rank_by_distance(reference, shops), reference, max_distance_km)
    return ranked[:limit] if limit else ranked


def search_medicines_near(
    query: str,
    reference: object | None,
    *,
    max_distance_km: float | None = None,
    limit: Optional[int] = None,
) -> list[RankedEntity[Medicine]]:
    medicines = catalog_repository.search_medicines(query)
    ranked = _limit_by_radius(rank_by_distance(reference, medicines), reference, max_distance_km)
    return ranked[:limit] if limit else ranked
