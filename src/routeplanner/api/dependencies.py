"""Request-scoped accessors for objects created once in ``create_app``."""

from __future__ import annotations

from fastapi import Request

from ..config import Settings
from ..persistence.database import RouteStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_route_store(request: Request) -> RouteStore:
    return request.app.state.route_store
