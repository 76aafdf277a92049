"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...persistence.database import RouteStore, RouteStoreError
from ..dependencies import get_route_store

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(store: RouteStore = Depends(get_route_store)) -> dict:
    """Check that the delivery_routes table can be read."""
    try:
        routes = store.list_recent_routes(1)
    except RouteStoreError as exc:
        return {
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {
        "connected": True,
        "has_routes": bool(routes),
        "message": "Database connected.",
    }
