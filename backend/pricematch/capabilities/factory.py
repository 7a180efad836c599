"""
Platform factory with singleton pattern.

WHAT: Bundle the datastore and blob store into one injectable capability
WHY: Endpoints receive the platform through a dependency instead of importing clients
HOW: Build from settings on first use, cache, allow reset and override in tests
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .interfaces import Datastore, BlobStore


@dataclass
class Platform:
    """Backend capabilities handed to services."""
    datastore: "Datastore"
    blobs: "BlobStore"


# Singleton instance
_platform_instance: "Platform | None" = None


def get_platform() -> Platform:
    """
    Get the configured platform singleton.

    Returns:
        Platform wired to the SQL datastore and local blob store
    """
    global _platform_instance

    if _platform_instance is None:
        # Import here to avoid circular dependencies
        from ..core.config import settings
        from ..utils.logger import get_logger
        from .sql_datastore import SqlDatastore
        from .blob_store import LocalBlobStore

        logger = get_logger(__name__)
        _platform_instance = Platform(
            datastore=SqlDatastore(),
            blobs=LocalBlobStore(settings.STORAGE_DIR, settings.STORAGE_PUBLIC_BASE_URL),
        )
        logger.info(f"Platform initialized (storage={settings.STORAGE_DIR})")

    return _platform_instance


def reset_platform() -> None:
    """Reset the platform singleton (useful for testing)."""
    global _platform_instance
    _platform_instance = None
