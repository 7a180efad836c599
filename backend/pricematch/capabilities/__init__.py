"""Backend capabilities (datastore + blob store)."""

from .interfaces import Datastore, BlobStore
from .factory import Platform, get_platform, reset_platform
from .sql_datastore import SqlDatastore
from .blob_store import LocalBlobStore

__all__ = [
    "Datastore",
    "BlobStore",
    "Platform",
    "get_platform",
    "reset_platform",
    "SqlDatastore",
    "LocalBlobStore",
]
