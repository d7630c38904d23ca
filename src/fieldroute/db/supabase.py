"""Cached Supabase client used by the repository layer."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the shared client, or None when FIELDROUTE_SUPABASE_URL/KEY are unset.

    Creating the client does not open a connection; failures surface on the first query.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("FIELDROUTE_SUPABASE_URL / FIELDROUTE_SUPABASE_KEY not set, Supabase disabled")
        return None

    try:
        client = create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Could not build Supabase client for {settings.supabase_url}: {e}")
        return None
    logging.info(f"Supabase client ready for {settings.supabase_url}")
    return client
