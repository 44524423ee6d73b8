"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Iterable, Optional, TypeVar

from ..models.domain import RankedEntity

EARTH_RADIUS_KM = 6371.0

EntityT = TypeVar("EntityT")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push antipodal pairs just past 1.0
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _position_of(item: object) -> Optional[tuple[float, float]]:
    if item is None:
        return None
    lat = getattr(item, "latitude", None)
    lon = getattr(item, "longitude", None)
    if lat is None or lon is None:
        return None
    return float(lat), float(lon)


def rank_by_distance(reference: object | None, entities: Iterable[EntityT]) -> list[RankedEntity[EntityT]]:
    """Pair each entity with its distance from ``reference`` and order nearest first.

    ``reference`` is anything exposing ``latitude``/``longitude`` (a
    ``Coordinates`` or a ``ResolvedLocation``). Entities whose distance cannot
    be computed carry ``None`` and sort after every known distance. The sort
    is stable, so ties and unknowns keep their input order. Inputs are never
    mutated.
    """

    origin = _position_of(reference)
    ranked: list[RankedEntity[EntityT]] = []
    for entity in entities:
        target = _position_of(entity)
        distance = None
        if origin is not None and target is not None:
            distance = haversine_km(origin[0], origin[1], target[0], target[1])
        ranked.append(RankedEntity(entity=entity, distance_km=distance))

    return sorted(ranked, key=lambda item: (item.distance_km is None, item.distance_km or 0.0))


def within_distance(
    ranked: Iterable[RankedEntity[EntityT]],
    max_distance_km: float | None,
) -> list[RankedEntity[EntityT]]:
    """Drop entries beyond ``max_distance_km`` or of unknown distance."""

    if max_distance_km is None:
        return list(ranked)
    return [item for item in ranked if item.distance_km is not None and item.distance_km <= max_distance_km]
