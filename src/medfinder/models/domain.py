"""Domain models for locations, shops and medicines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, Protocol, TypeVar

UNKNOWN_AREA = "Unknown Area"
UNKNOWN_POSTAL_CODE = "Unknown Pincode"


@dataclass(frozen=True, slots=True)
class Coordinates:
    """A single device fix in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


@dataclass(frozen=True, slots=True)
class ResolvedLocation:
    """Display-ready location: a device fix combined with its (possibly degraded) address."""

    area: str
    postal_code: str
    latitude: Optional[float]
    longitude: Optional[float]
    # set only when geocoding failed; a lookup may succeed and still name no area
    is_degraded: bool = False

    @classmethod
    def degraded(cls, coordinates: Coordinates) -> "ResolvedLocation":
        return cls(
            area=UNKNOWN_AREA,
            postal_code=UNKNOWN_POSTAL_CODE,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            is_degraded=True,
        )

    @property
    def coordinates(self) -> Optional[Coordinates]:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)


class RankableEntity(Protocol):
    """Anything that may expose a position for distance ranking."""

    @property
    def latitude(self) -> Optional[float]: ...

    @property
    def longitude(self) -> Optional[float]: ...


EntityT = TypeVar("EntityT")


@dataclass(frozen=True, slots=True)
class RankedEntity(Generic[EntityT]):
    """Pairs an entity with its distance from the reference point, if known."""

    entity: EntityT
    distance_km: Optional[float]


@dataclass(slots=True)
class Shop:
    """Represents a pharmacy listed in the catalog."""

    shop_id: str
    name: str
    address: str
    phone: Optional[str] = None
    maps_link: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_id: Optional[str] = None
    raw: dict = field(default_factory=dict)


@dataclass(slots=True)
class Medicine:
    """A stocked medicine; ranked by the position of the shop that holds it."""

    medicine_id: str
    name: str
    price: float
    stock_quantity: int = 0
    description: Optional[str] = None
    shop_id: Optional[str] = None
    shop: Optional[Shop] = None
    raw: dict = field(default_factory=dict)

    @property
    def latitude(self) -> Optional[float]:
        return self.shop.latitude if self.shop else None

    @property
    def longitude(self) -> Optional[float]:
        return self.shop.longitude if self.shop else None
