"""Shop and medicine listing schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ShopListingModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    shop_id: str
    name: str
    address: str
    phone: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    maps_link: Optional[str] = None
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None


class MedicineListingModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    medicine_id: str
    name: str
    price: float
    price_label: str
    stock_quantity: int
    description: Optional[str] = None
    distance_km: Optional[float] = None
    distance_label: Optional[str] = None
    shop: Optional[ShopListingModel] = None


class ShopListResponse(BaseModel):
    items: List[ShopListingModel]
    total: int
    ranked: bool


class MedicineSearchResponse(BaseModel):
    query: str
    items: List[MedicineListingModel]
    total: int
    ranked: bool
