"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...db.supabase import get_supabase_client

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoder_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.location.geocoder import check_health as geocoder_health_check
    return geocoder_health_check


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
async def health_geocoder() -> dict:
    """Check that reverse geocoding answers."""
    try:
        geocoder_health_check = _get_geocoder_health_check()
        status_flag = await geocoder_health_check()
        return {"service": "geocoder", "healthy": status_flag}
    except Exception as e:
        return {"service": "geocoder", "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check catalog database connection."""
    from ...data.catalog_repository import count_shops

    if not get_supabase_client():
        return {
            "configured": False,
            "message": "Supabase not configured. Set MEDFINDER_SUPABASE_URL and MEDFINDER_SUPABASE_KEY environment variables.",
            "shops_count": 0,
        }

    try:
        shops_count = count_shops()
        return {
            "configured": True,
            "connected": True,
            "shops_count": shops_count,
            "message": f"Database connected. Found {shops_count} shops.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
