"""
Status and health check endpoints.

WHAT: Health of the database and the attachment storage directory
WHY: Quick diagnostics for frontend and ops
HOW: Database ping plus a writability check on STORAGE_DIR
"""

import os
from pathlib import Path

from fastapi import APIRouter

from ....core.database import ping_database
from ....core.config import settings

router = APIRouter()


def storage_status() -> dict:
    storage_dir = Path(settings.STORAGE_DIR)
    if not storage_dir.is_dir():
        return {"available": False, "error": f"{storage_dir} does not exist"}
    if not os.access(storage_dir, os.W_OK):
        return {"available": False, "error": f"{storage_dir} is not writable"}
    return {"available": True, "error": None}


@router.get("/health")
async def health_check():
    """
    Overall application health check.

    Returns:
        JSON with overall status and per-component details; "degraded"
        when any component is unavailable
    """
    components = {
        "database": ping_database(),
        "storage": storage_status(),
    }

    return {
        "status": "healthy" if all(c["available"] for c in components.values()) else "degraded",
        "version": settings.APP_VERSION,
        "app_name": settings.APP_NAME,
        "components": components
    }
