import math

import pytest

from src.medfinder.data import catalog_repository
from src.medfinder.models.domain import Coordinates, Medicine, Shop
from src.medfinder.services.search import SearchResultPresenter, catalog, filter_shops, maps_link
from src.medfinder.services.geospatial import rank_by_distance

BENGALURU = Coordinates(latitude=12.9716, longitude=77.5946)
KM_PER_DEGREE_LAT = math.pi * 6371.0 / 180.0


def _shop(sid: str, km_north: float | None = None, **kwargs) -> Shop:
    lat = BENGALURU.latitude + km_north / KM_PER_DEGREE_LAT if km_north is not None else None
    lon = BENGALURU.longitude if km_north is not None else None
    return Shop(
        shop_id=sid,
        name=kwargs.pop("name", f"Shop {sid}"),
        address=kwargs.pop("address", f"{sid} 100 Feet Road"),
        latitude=lat,
        longitude=lon,
        **kwargs,
    )


def _medicine(mid: str, shop: Shop | None, price: float = 25.0) -> Medicine:
    return Medicine(medicine_id=mid, name=f"Paracetamol {mid}", price=price, stock_quantity=10, shop=shop)


def test_maps_link_prefers_explicit_link():
    shop = _shop("A", 1.0, maps_link="https://maps.example/a")
    assert maps_link(shop) == "https://maps.example/a"


def test_maps_link_built_from_coordinates_or_missing():
    shop = Shop(shop_id="A", name="A", address="x", latitude=12.97, longitude=77.59)
    assert maps_link(shop) == "https://www.google.com/maps?q=12.97,77.59"
    assert maps_link(_shop("B")) is None


def test_presenter_labels():
    presenter = SearchResultPresenter()

    assert presenter.format_distance(None) is None
    assert presenter.format_distance(1.234) == "1.2 km away"
    assert presenter.format_price(12.5) == "₹12.50"


def test_present_medicines_carries_shop_distance():
    near = _shop("near", 0.8)
    ranked = rank_by_distance(BENGALURU, [_medicine("1", None), _medicine("2", near)])

    listings = SearchResultPresenter().present_medicines(ranked)

    assert [listing.medicine_id for listing in listings] == ["2", "1"]
    assert listings[0].distance_label == "0.8 km away"
    assert listings[0].shop.shop_id == "near"
    assert listings[1].shop is None
    assert listings[1].distance_km is None


def test_filter_shops_matches_name_or_address():
    shops = [
        _shop("A", name="Apollo Pharmacy", address="Indiranagar"),
        _shop("B", name="MedPlus", address="Koramangala"),
        _shop("C", name="Wellness Forever", address="HAL Road, Indiranagar"),
    ]

    assert [shop.shop_id for shop in filter_shops(shops, "indiranagar")] == ["A", "C"]
    assert [shop.shop_id for shop in filter_shops(shops, "MEDPLUS")] == ["B"]
    assert len(filter_shops(shops, "  ")) == 3


def test_nearby_shops_ranks_and_limits_radius(monkeypatch):
    shops = (_shop("far", 12.0), _shop("unknown"), _shop("A", 2.3), _shop("B", 0.8))
    monkeypatch.setattr(catalog_repository, "list_shops", lambda: shops)

    ranked = catalog.nearby_shops(BENGALURU)
    assert [item.entity.shop_id for item in ranked] == ["B", "A", "far", "unknown"]

    within = catalog.nearby_shops(BENGALURU, max_distance_km=5.0)
    assert [item.entity.shop_id for item in within] == ["B", "A"]

    limited = catalog.nearby_shops(BENGALURU, limit=1)
    assert [item.entity.shop_id for item in limited] == ["B"]


def test_nearby_shops_without_reference_ignores_radius(monkeypatch):
    shops = (_shop("far", 12.0), _shop("unknown"))
    monkeypatch.setattr(catalog_repository, "list_shops", lambda: shops)

    ranked = catalog.nearby_shops(None, max_distance_km=1.0)

    assert [item.entity.shop_id for item in ranked] == ["far", "unknown"]
    assert all(item.distance_km is None for item in ranked)


def test_search_medicines_near_ranks_by_shop(monkeypatch):
    medicines = (_medicine("1", _shop("A", 2.3)), _medicine("2", _shop("B", 0.8)))
    seen: list[str] = []

    def fake_search(query):
        seen.append(query)
        return medicines

    monkeypatch.setattr(catalog_repository, "search_medicines", fake_search)

    ranked = catalog.search_medicines_near("para", BENGALURU)

    assert seen == ["para"]
    assert [item.entity.medicine_id for item in ranked] == ["2", "1"]
    assert ranked[0].distance_km == pytest.approx(0.8, abs=0.01)
