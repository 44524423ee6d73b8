"""Search and listing helpers."""

from .catalog import filter_shops, nearby_shops, search_medicines_near
from .presenter import MedicineListing, SearchResultPresenter, ShopListing, maps_link

__all__ = [
    "filter_shops",
    "nearby_shops",
    "search_medicines_near",
    "MedicineListing",
    "SearchResultPresenter",
    "ShopListing",
    "maps_link",
]
