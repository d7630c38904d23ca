"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...persistence import FieldRepository
from ..deps import RepositoryDep

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(repository: FieldRepository = RepositoryDep) -> dict:
    """Report which repository backend is serving requests."""
    backend = repository.backend_name
    if backend != "supabase":
        return {
            "configured": False,
            "backend": backend,
            "message": "Supabase not configured. Set FIELDROUTE_SUPABASE_URL and FIELDROUTE_SUPABASE_KEY environment variables.",
        }

    try:
        repository.client.table("daily_routes").select("id", count="exact").limit(1).execute()
        return {"configured": True, "backend": backend, "connected": True}
    except Exception as exc:
        return {
            "configured": True,
            "backend": backend,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
