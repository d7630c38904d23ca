"""Repository implementations."""

from __future__ import annotations

import logging
from functools import lru_cache

from ..db.supabase import get_supabase_client
from .memory import InMemoryRepository
from .repository import FieldRepository


@lru_cache()
def get_repository() -> FieldRepository:
    """Process-wide repository: Supabase when configured, in-memory otherwise."""
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - using in-memory repository, data will not persist")
        return InMemoryRepository()

    from .database import SupabaseRepository

    return SupabaseRepository(client)


__all__ = ["FieldRepository", "InMemoryRepository", "get_repository"]
