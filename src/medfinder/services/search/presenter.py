"""Display-ready views of ranked shops and medicines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ...models.domain import Medicine, RankedEntity, Shop

GOOGLE_MAPS_URL = "https://www.google.com/maps?q={latitude},{longitude}"


def maps_link(shop: Shop) -> Optional[str]:
    """Prefer the shop's own link, else build one from its coordinates."""
    if shop.maps_link:
        return shop.maps_link
    if shop.latitude is not None and shop.longitude is not None:
        return GOOGLE_MAPS_URL.format(latitude=shop.latitude, longitude=shop.longitude)
    return None


@dataclass(frozen=True, slots=True)
class ShopListing:
    shop_id: str
    name: str
    address: str
    phone: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    maps_link: Optional[str]
    distance_km: Optional[float]
    distance_label: Optional[str]


@dataclass(frozen=True, slots=True)
class MedicineListing:
    medicine_id: str
    name: str
    price: float
    price_label: str
    stock_quantity: int
    description: Optional[str]
    distance_km: Optional[float]
    distance_label: Optional[str]
    shop: Optional[ShopListing]


class SearchResultPresenter:
    def __init__(self, *, currency_symbol: str = "₹", distance_precision: int = 1) -> None:
        self.currency_symbol = currency_symbol
        self.distance_precision = distance_precision

    def format_distance(self, distance_km: Optional[float]) -> Optional[str]:
        if distance_km is None:
            return None
        return f"{distance_km:.{self.distance_precision}f} km away"

    def format_price(self, price: float) -> str:
        return f"{self.currency_symbol}{price:.2f}"

    def shop_listing(self, shop: Shop, distance_km: Optional[float]) -> ShopListing:
        return ShopListing(
            shop_id=shop.shop_id,
            name=shop.name,
            address=shop.address,
            phone=shop.phone,
            latitude=shop.latitude,
            longitude=shop.longitude,
            maps_link=maps_link(shop),
            distance_km=distance_km,
            distance_label=self.format_distance(distance_km),
        )

    def present_shops(self, ranked: Iterable[RankedEntity[Shop]]) -> list[ShopListing]:
        return [self.shop_listing(item.entity, item.distance_km) for item in ranked]

    def present_medicines(self, ranked: Iterable[RankedEntity[Medicine]]) -> list[MedicineListing]:
        listings = []
        for item in ranked:
            medicine = item.entity
            listings.append(
                MedicineListing(
                    medicine_id=medicine.medicine_id,
                    name=medicine.name,
                    price=medicine.price,
                    price_label=self.format_price(medicine.price),
                    stock_quantity=medicine.stock_quantity,
                    description=medicine.description,
                    distance_km=item.distance_km,
                    distance_label=self.format_distance(item.distance_km),
                    shop=self.shop_listing(medicine.shop, item.distance_km) if medicine.shop else None,
                )
            )
        return listings
