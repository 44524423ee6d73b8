"""Read-only access to the shop and medicine catalog stored in Supabase."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import CatalogUnavailableError, require_supabase_client
from ..models.domain import Medicine, Shop

logger = logging.getLogger(__name__)


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def shop_from_row(row: dict) -> Shop:
    """Adapt a ``shops`` row to a ``Shop``; raises ``KeyError``/``ValueError`` on bad rows."""
    return Shop(
        shop_id=str(row["id"]),
        name=str(row["name"]).strip(),
        address=(row.get("address") or "").strip(),
        phone=_clean(row.get("phone")),
        maps_link=_clean(row.get("maps_link")),
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
        owner_id=_clean(row.get("user_id")),
        raw=row,
    )


def medicine_from_row(row: dict) -> Medicine:
    """Adapt a ``medicines`` row, with its embedded ``shops`` record when selected."""
    shop_row = row.get("shops")
    shop = shop_from_row(shop_row) if isinstance(shop_row, dict) else None
    return Medicine(
        medicine_id=str(row["id"]),
        name=str(row["name"]).strip(),
        price=float(row["price"]),
        stock_quantity=int(row.get("stock_quantity") or 0),
        description=_clean(row.get("description")),
        shop_id=_clean(row.get("shop_id")),
        shop=shop,
        raw=row,
    )


def _adapt_rows(rows: Iterable[dict], adapter, kind: str) -> list:
    items = []
    for row in rows:
        try:
            items.append(adapter(row))
        except (KeyError, ValueError, TypeError) as e:
            # Skip invalid rows but continue processing
            logger.warning(f"Skipping invalid {kind} row: {e}")
    return items


def _execute(query, description: str) -> list[dict]:
    try:
        response = query.execute()
    except Exception as exc:
        raise CatalogUnavailableError(f"Failed to load {description}: {exc}") from exc
    return response.data or []


def list_shops() -> tuple[Shop, ...]:
    client = require_supabase_client()
    rows = _execute(client.table(settings.shops_table).select("*"), "shops")
    return tuple(_adapt_rows(rows, shop_from_row, "shop"))


def get_shop(shop_id: str) -> Shop | None:
    client = require_supabase_client()
    query = client.table(settings.shops_table).select("*").eq("id", shop_id).limit(1)
    rows = _adapt_rows(_execute(query, f"shop {shop_id}"), shop_from_row, "shop")
    return rows[0] if rows else None


def list_shop_medicines(shop_id: str) -> tuple[Medicine, ...]:
    client = require_supabase_client()
    query = client.table(settings.medicines_table).select("*").eq("shop_id", shop_id)
    return tuple(_adapt_rows(_execute(query, f"medicines for shop {shop_id}"), medicine_from_row, "medicine"))


def search_medicines(query_text: str) -> tuple[Medicine, ...]:
    """Case-insensitive substring match on medicine name, with the owning shop embedded."""
    term = query_text.strip()
    if not term:
        return tuple()
    client = require_supabase_client()
    query = (
        client.table(settings.medicines_table)
        .select("*, shops:shop_id(*)")
        .ilike("name", f"%{term}%")
    )
    return tuple(_adapt_rows(_execute(query, "medicine search"), medicine_from_row, "medicine"))


def count_shops() -> int:
    client = require_supabase_client()
    try:
        response = client.table(settings.shops_table).select("id", count="exact").limit(1).execute()
    except Exception as exc:
        raise CatalogUnavailableError(f"Failed to count shops: {exc}") from exc
    return response.count or 0
