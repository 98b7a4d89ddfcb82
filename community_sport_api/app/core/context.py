"""
Per‑application state shared by routes and services.

``create_app`` builds one ``AppContext`` and stores it on
``app.state.context``.  Routes receive it through the ``get_context``
dependency and construct their services from it, so two applications
in the same process (for example in tests) never share a cache or a
database.
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .config import Settings
from .db import get_database_path, init_db, open_anchor
from .store import CatalogStore
from ..services.catalog_cache import CatalogCache


@dataclass
class AppContext:
    settings: Settings
    store: CatalogStore
    cache: CatalogCache
    # Open for the lifetime of the context when the database is in memory
    anchor: Optional[sqlite3.Connection] = None


def build_context(settings: Settings) -> AppContext:
    """Open the store, apply migrations and create an empty cache."""
    db_path = get_database_path(settings.database_url)
    anchor = open_anchor(db_path)
    init_db(db_path)
    store = CatalogStore(db_path)
    cache = CatalogCache(store, ttl_seconds=settings.cache_ttl_seconds)
    return AppContext(settings=settings, store=store, cache=cache, anchor=anchor)


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context of the running app."""
    return request.app.state.context
